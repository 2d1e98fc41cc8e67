"""Error types raised while parsing and solving pool equations.

All of them derive from ``ValueError`` so callers that only care about
"bad input" can keep catching that.
"""


class SolverError(ValueError):
    """Base class for every failure raised by the evaluator."""


class ParseError(SolverError):
    """Equation text is malformed or references undeclared symbols."""


class UnsolvableError(SolverError):
    """The system has no solution, or more than one."""


class MissingUnknownError(SolverError):
    """An unknown was requested that the solution does not contain."""
