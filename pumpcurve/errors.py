"""
Error taxonomy for curve pricing

Every failure is raised to the immediate caller and is never retried
here. Each error also derives from the matching builtin exception.
"""


class CurveError(Exception):
    """Base class for all pricing and simulation failures"""


class CurveCompleteError(CurveError, RuntimeError):
    """Operation attempted on a curve that has migrated (complete = True)"""

    def __init__(self, message: str = "Curve is complete"):
        super().__init__(message)


class InsufficientLiquidityError(CurveError, ValueError):
    """Requested amount exceeds the available virtual or real reserve"""


class DivisionByZeroError(CurveError, ZeroDivisionError):
    """Degenerate reserve state, e.g. zero virtual token reserves"""


class ArithmeticOverflowError(CurveError, OverflowError):
    """Result does not fit in an unsigned 64-bit quantity"""


class InvalidAmountError(CurveError, ValueError):
    """Negative, non-integer or otherwise out-of-domain input"""
