"""Constant-product pool reserves: the equations and how they are printed."""

import sympy

from poolcalc.engine import EquationSolver
from poolcalc.numerical import _format_numeric
from poolcalc.settings import DEFAULT_SETTINGS

# Reserve of ETH times reserve of DAI is the pool invariant; their ratio
# is the pool price.
POOL_EQUATIONS = ("x * y = 100", "x / y = 1 / 150")
POOL_UNKNOWNS = ("x", "y")

ASSET_LABELS = {"x": "ETH", "y": "DAI"}

LINE_TEMPLATE = "池子中 {asset} 的数量：{value}"

OUTPUT_MODES = ("numeric", "exact")


def pool_solver(settings=None) -> EquationSolver:
    """Solver for the pool system; reserves are positive unless configured off."""
    settings = settings or DEFAULT_SETTINGS
    return EquationSolver(positive=settings.get("positive_unknowns", True))


def format_value(value, settings=None) -> str:
    """Render one solved value according to *settings*."""
    settings = settings or DEFAULT_SETTINGS
    mode = settings.get("output_mode", "numeric")
    if mode not in OUTPUT_MODES:
        raise ValueError(
            f"Unknown output_mode '{mode}'. Use one of: {', '.join(OUTPUT_MODES)}."
        )
    # Raises for complex or non-finite values in either mode
    text = _format_numeric(value, settings.get("max_decimals", 10))
    if mode == "exact":
        return sympy.sstr(value)
    return text


def render_lines(solution, settings=None, labels=None) -> list[str]:
    """Return one output line per labelled unknown, in label order."""
    labels = labels or ASSET_LABELS
    return [
        LINE_TEMPLATE.format(asset=asset, value=format_value(solution[name], settings))
        for name, asset in labels.items()
    ]
