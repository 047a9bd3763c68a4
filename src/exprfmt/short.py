"""Short aliases for the interpolation functions, for `from exprfmt.short import *`."""

from exprfmt.interpolate import ex_eprint, ex_eprintln, ex_format, ex_print, ex_println

__all__ = ["exf", "exp", "expl", "exep", "exepl"]

exf = ex_format
exp = ex_print
expl = ex_println
exep = ex_eprint
exepl = ex_eprintln
