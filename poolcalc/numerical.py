"""Decimal rendering and floating-point checks for solved values."""

import numpy as np

from poolcalc.errors import UnsolvableError


# ── Numeric formatting helpers ──────────────────────────────────────────

def _fmt_num(value: float, max_decimals: int = 10) -> str:
    """Format a float into a clean decimal string.

    - Removes trailing zeros after the decimal point.
    - Uses up to *max_decimals* digits of precision.
    - Returns integers without a decimal point (e.g. ``7`` not ``7.0``).
    """
    if not np.isfinite(value):
        raise UnsolvableError(f"Value {value} is not a finite number.")
    if abs(value - round(value)) < 1e-12:
        return str(int(round(value)))
    formatted = f"{value:.{max_decimals}f}".rstrip("0").rstrip(".")
    if formatted == "-0":
        return "0"
    return formatted


def to_float(value) -> float:
    """Convert a SymPy value to a finite real float.

    Raises UnsolvableError for symbolic leftovers, complex values, NaN
    and infinities.
    """
    try:
        c = complex(value)
    except (TypeError, ValueError):
        raise UnsolvableError(
            f"Value {value} does not evaluate to a number."
        ) from None
    if abs(c.imag) > 1e-12:
        raise UnsolvableError(f"Value {value} is not a real number.")
    real = np.float64(c.real)
    if not np.isfinite(real):
        raise UnsolvableError(f"Value {value} is not a finite number.")
    return float(real)


def _format_numeric(value, max_decimals: int = 10) -> str:
    """Convert a SymPy expression to its numeric (decimal) string."""
    return _fmt_num(to_float(value), max_decimals)


def residuals_close(lhs_values, rhs_values, tolerance: float = 1e-9) -> bool:
    """Return True when every LHS matches its RHS within *tolerance*.

    The tolerance is applied both absolutely and relative to the RHS, so
    large constants such as a pool's invariant are compared fairly.
    """
    lhs = np.asarray([to_float(v) for v in lhs_values], dtype=np.float64)
    rhs = np.asarray([to_float(v) for v in rhs_values], dtype=np.float64)
    return bool(np.all(np.isclose(lhs, rhs, rtol=tolerance, atol=tolerance)))
