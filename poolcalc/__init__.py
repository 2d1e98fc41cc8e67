from poolcalc.errors import (
    SolverError, ParseError, UnsolvableError, MissingUnknownError,
)
from poolcalc.engine import EquationSolver, Solution, evaluate, solve_system

__all__ = [
    "SolverError", "ParseError", "UnsolvableError", "MissingUnknownError",
    "EquationSolver", "Solution", "evaluate", "solve_system",
]
