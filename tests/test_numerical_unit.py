"""Tests for decimal rendering and the NumPy residual check."""

import math

import pytest
import sympy

from poolcalc.errors import UnsolvableError
from poolcalc.numerical import _fmt_num, _format_numeric, residuals_close, to_float


# ── _fmt_num helper ──────────────────────────────────────────────────────

class TestFmtNum:
    def test_integer(self):
        assert _fmt_num(7.0) == "7"

    def test_clean_decimal(self):
        assert _fmt_num(2.5) == "2.5"

    def test_trailing_zeros_stripped(self):
        assert _fmt_num(1.50000) == "1.5"

    def test_very_small_rounds_to_int(self):
        assert _fmt_num(3.0000000000001) == "3"

    def test_max_decimals(self):
        assert _fmt_num(1 / 3, max_decimals=4) == "0.3333"

    def test_negative_zero(self):
        assert _fmt_num(-1e-11) == "0"

    @pytest.mark.parametrize("value", [math.inf, -math.inf, math.nan])
    def test_non_finite_rejected(self, value):
        with pytest.raises(UnsolvableError, match="not a finite"):
            _fmt_num(value)


# ── SymPy → float ───────────────────────────────────────────────────────

class TestToFloat:
    def test_exact_value(self):
        assert to_float(sympy.sqrt(6) / 3) == pytest.approx(math.sqrt(2 / 3))

    def test_complex_rejected(self):
        with pytest.raises(UnsolvableError, match="not a real"):
            to_float(1 + sympy.I)

    @pytest.mark.parametrize("value", [sympy.oo, sympy.nan])
    def test_non_finite_rejected(self, value):
        with pytest.raises(UnsolvableError):
            to_float(value)

    def test_symbolic_rejected(self):
        with pytest.raises(UnsolvableError, match="does not evaluate"):
            to_float(sympy.Symbol("z"))


def test_format_numeric_pool_values() -> None:
    assert _format_numeric(sympy.sqrt(6) / 3) == "0.8164965809"
    assert _format_numeric(50 * sympy.sqrt(6)) == "122.4744871392"


def test_residuals_close() -> None:
    assert residuals_close([100.00000000000001, 1 / 150], [100, sympy.Rational(1, 150)])
    assert not residuals_close([100.001], [100])
    assert residuals_close([1.0005], [1], tolerance=1e-3)
