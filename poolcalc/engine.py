"""Simultaneous equation evaluator built on SymPy."""

"""
Parses small systems of equations (e.g. "x * y = 100", "x / y = 1/150"),
solves them for a declared list of unknowns, and insists on exactly one
solution.  ``solve_system`` wraps the bare evaluation in the usual
step / verification / summary result dict.
"""

import re
import time
from datetime import datetime

import sympy
from sympy import Eq, Symbol, simplify, solve
from sympy.parsing.sympy_parser import (
    parse_expr, standard_transformations, implicit_multiplication_application,
    convert_xor, rationalize,
)

from poolcalc.errors import (
    SolverError, ParseError, UnsolvableError, MissingUnknownError,
)
from poolcalc.numerical import _format_numeric, residuals_close

__all__ = [
    "SolverError", "ParseError", "UnsolvableError", "MissingUnknownError",
    "Solution", "EquationSolver", "evaluate", "solve_system",
]

TRANSFORMATIONS = standard_transformations + (
    implicit_multiplication_application,
    convert_xor,
)

_IDENTIFIER = re.compile(r'^[A-Za-z_][A-Za-z0-9_]*$')

# Function and constant names that must never be split into unknowns.
_RESERVED = {
    "sin", "cos", "tan", "log", "ln", "exp", "sqrt",
    "pi", "Pi", "PI", "abs", "E",
}

_ALLOWED_CHARS = set("abcdefghijklmnopqrstuvwxyz"
                     "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
                     "0123456789"
                     " \t_+-*/^=().")


# ── Input validation helpers ────────────────────────────────────────────

def _normalize_input(equation_str: str) -> str:
    """Map display symbols and bracket styles onto parser-friendly text."""
    s = equation_str.replace('√', 'sqrt')
    s = s.replace('π', '(pi)')
    s = s.replace('[', '(').replace(']', ')')
    s = s.replace('{', '(').replace('}', ')')
    return s


def _validate_characters(equation_str: str) -> None:
    """Reject equations that contain characters outside the allowed set.

    Allowed: letters, digits, underscore, whitespace, and the math symbols
    + - * / ^ = ( ) .
    """
    bad = {ch for ch in equation_str if ch not in _ALLOWED_CHARS}
    if bad:
        bad_sorted = " ".join(sorted(bad))
        raise ParseError(
            f"Invalid character(s): {bad_sorted}\n"
            f"Only letters, numbers, and math symbols "
            f"(+ - * / ^ = ( ) .) are allowed."
        )


def _check_parentheses(equation_str: str) -> None:
    """Raise ParseError unless every '(' has a matching ')'."""
    depth = 0
    for i, ch in enumerate(equation_str):
        if ch == '(':
            depth += 1
        elif ch == ')':
            depth -= 1
            if depth < 0:
                raise ParseError(
                    f"Unbalanced parentheses: unexpected ')' at position {i} "
                    f"in '{equation_str}'."
                )
    if depth:
        raise ParseError(
            f"Unbalanced parentheses: {depth} unclosed '(' in '{equation_str}'."
        )


def _split_sides(equation_str: str) -> tuple:
    if '=' not in equation_str:
        raise ParseError(
            f"Equation must contain '='. Problem: {equation_str}"
        )
    parts = equation_str.split('=')
    if len(parts) != 2:
        raise ParseError(
            f"Equation must contain exactly one '=' sign. Problem: {equation_str}"
        )
    lhs_str, rhs_str = parts[0].strip(), parts[1].strip()
    if not lhs_str or not rhs_str:
        raise ParseError(
            f"Both sides of the equation must have expressions. "
            f"Problem: {equation_str}"
        )
    return lhs_str, rhs_str


def _expand_implicit_vars(s: str, var_names: set) -> str:
    """Replace multi-letter tokens composed entirely of single-letter
    unknowns with explicit multiplication (e.g. ``xy`` → ``x*y``) so that
    Python reserved words like ``as`` or ``in`` never reach the parser."""
    singles = {v for v in var_names if len(v) == 1}

    def _repl(m):
        tok = m.group(0)
        if tok in var_names or tok in _RESERVED:
            return tok
        if len(tok) > 1 and all(ch in singles for ch in tok):
            return '*'.join(tok)
        return tok
    return re.sub(r'[A-Za-z_][A-Za-z0-9_]*', _repl, s)


def _check_declared(eq, var_symbols, source=None) -> None:
    """Raise ParseError if *eq* uses a symbol outside *var_symbols*."""
    stray = eq.free_symbols - set(var_symbols)
    if stray:
        names = ", ".join(sorted(s.name for s in stray))
        declared = ", ".join(s.name for s in var_symbols)
        raise ParseError(
            f"Undeclared symbol(s) {names} in '{source or sympy.sstr(eq)}'. "
            f"Declared unknowns: {declared}."
        )


# ── Solution mapping ────────────────────────────────────────────────────

class Solution(dict):
    """Mapping of unknown name → solved SymPy value.

    Indexing with a name the solver did not produce raises
    MissingUnknownError instead of KeyError.
    """

    def __missing__(self, name):
        solved = ", ".join(self) or "none"
        raise MissingUnknownError(
            f"Unknown '{name}' is not part of the solution (solved: {solved})."
        )


# ── Solver context ──────────────────────────────────────────────────────

class EquationSolver:
    """Parser and solver settings for one evaluation.

    Unknowns are created with the solver's assumptions.  With
    ``positive=True`` only positive roots are admitted, which is what pool
    reserves are and which makes a constant-product system single-valued.
    """

    def __init__(self, positive: bool = False, rational: bool = True):
        self.positive = positive
        self.rational = rational
        self.transformations = TRANSFORMATIONS + ((rationalize,) if rational else ())
        self._symbols = {}

    def __repr__(self) -> str:
        return f"EquationSolver(positive={self.positive}, rational={self.rational})"

    def symbols_for(self, names) -> list:
        """Return one Symbol per name, carrying this solver's assumptions."""
        names = list(names)
        if not names:
            raise ParseError("At least one unknown is required.")
        if len(set(names)) != len(names):
            raise ParseError(f"Unknown names must be distinct: {', '.join(names)}")
        result = []
        for name in names:
            if not isinstance(name, str) or not _IDENTIFIER.match(name):
                raise ParseError(f"Invalid unknown name: {name!r}")
            if name not in self._symbols:
                if self.positive:
                    self._symbols[name] = Symbol(name, positive=True)
                else:
                    self._symbols[name] = Symbol(name)
            result.append(self._symbols[name])
        return result

    def _parse_side(self, expr_str: str, local: dict):
        """Parse one side of an equation into a SymPy expression."""
        s = expr_str.strip().replace('^', '**')
        s = _expand_implicit_vars(s, set(local))
        try:
            return parse_expr(s, local_dict=dict(local),
                              transformations=self.transformations)
        except Exception as e:
            raise ParseError(
                f"Could not parse expression: '{expr_str}'. Error: {e}"
            ) from e

    def parse_equation(self, equation_str: str, unknowns) -> Eq:
        """Parse ``"<lhs> = <rhs>"`` over the declared *unknowns*."""
        if not isinstance(equation_str, str):
            raise ParseError(f"Equation must be text, got {type(equation_str).__name__}.")
        text = _normalize_input(equation_str)
        _validate_characters(text)
        _check_parentheses(text)
        lhs_str, rhs_str = _split_sides(text)

        var_symbols = self.symbols_for(unknowns)
        local = {sym.name: sym for sym in var_symbols}
        lhs = self._parse_side(lhs_str, local)
        rhs = self._parse_side(rhs_str, local)

        for side in (lhs, rhs):
            if not isinstance(side, sympy.Expr):
                raise ParseError(
                    f"Could not parse expression: '{equation_str}' "
                    f"is not an algebraic equation."
                )
        eq = Eq(lhs, rhs, evaluate=False)
        _check_declared(eq, var_symbols, equation_str)
        return eq

    def solve(self, equations, unknowns) -> list:
        """Solve already parsed equations; returns SymPy's list of dicts."""
        var_symbols = self.symbols_for(unknowns)
        return solve(list(equations), var_symbols, dict=True)


# ── Public entry points ─────────────────────────────────────────────────

def evaluate(equations, unknowns, solver=None) -> Solution:
    """
    Solve *equations* (strings or SymPy ``Eq``) for *unknowns*.

    Every equation is parsed before anything is solved.  Returns a
    ``Solution`` keyed by unknown name, in the order the unknowns were
    declared.

    Raises ParseError for malformed input and UnsolvableError unless the
    system has exactly one finite real solution.
    """
    solver = solver or EquationSolver()
    unknowns = list(unknowns)
    var_symbols = solver.symbols_for(unknowns)

    eq_objects = []
    for eq in equations:
        if isinstance(eq, Eq):
            _check_declared(eq, var_symbols)
            eq_objects.append(eq)
        else:
            eq_objects.append(solver.parse_equation(eq, unknowns))
    if not eq_objects:
        raise ParseError("At least one equation is required.")

    solutions = solver.solve(eq_objects, unknowns)
    if not solutions:
        raise UnsolvableError(
            "No solution: the system is inconsistent for "
            f"{', '.join(unknowns)}."
        )
    if len(solutions) > 1:
        raise UnsolvableError(
            f"The solution is not unique: {len(solutions)} solutions for "
            f"{', '.join(unknowns)}."
        )

    sol_dict = solutions[0]
    free_vars = [
        name for name, sym in zip(unknowns, var_symbols)
        if sym not in sol_dict or sol_dict[sym].free_symbols
    ]
    if free_vars:
        raise UnsolvableError(
            "Infinitely many solutions: "
            f"{', '.join(free_vars)} can take any value."
        )

    solution = Solution()
    for name, sym in zip(unknowns, var_symbols):
        value = simplify(sol_dict[sym])
        # Raises UnsolvableError for complex or infinite values.
        _format_numeric(value)
        solution[name] = value
    return solution


def solve_system(equations, unknowns, solver=None, tolerance: float = 1e-9) -> dict:
    """
    Solve a system and describe the work.

    Returns a dict with:
      - equation: the equations joined by ", "
      - given / method: what was asked and how it was solved
      - steps, verification_steps: lists of {description, expression,
        explanation, step_number}
      - final_answer: one ``name = value`` line per unknown
      - solution: the ``Solution`` mapping
      - summary: runtime, step counts, validation status and library
    """
    t_start = time.perf_counter()
    solver = solver or EquationSolver()
    unknowns = list(unknowns)

    raw_equations = [str(eq).strip() for eq in equations]
    eq_objects = [
        eq if isinstance(eq, Eq) else solver.parse_equation(eq, unknowns)
        for eq in equations
    ]
    solution = evaluate(eq_objects, unknowns, solver)

    n_eq = len(eq_objects)
    n_var = len(unknowns)
    steps = []

    sys_lines = "\n".join(
        f"  ({i + 1})  {eq}" for i, eq in enumerate(raw_equations)
    )
    steps.append({
        "description": "System of equations",
        "expression": sys_lines,
        "explanation": (
            f"We have {n_eq} equation{'s' if n_eq != 1 else ''} "
            f"with {n_var} unknown{'s' if n_var != 1 else ''}: "
            f"{', '.join(unknowns)}."
        ),
    })

    steps.append({
        "description": "Solve simultaneously",
        "expression": "\n".join(
            f"  {sympy.sstr(eq.lhs)} = {sympy.sstr(eq.rhs)}" for eq in eq_objects
        ),
        "explanation": (
            "SymPy solves all equations together"
            + (", keeping only positive values." if solver.positive else ".")
        ),
    })

    final_parts = [
        f"{name} = {sympy.sstr(value)} ≈ {_format_numeric(value)}"
        for name, value in solution.items()
    ]
    steps.append({
        "description": "Solution",
        "expression": "\n".join(final_parts),
        "explanation": "Values that satisfy all equations simultaneously.",
    })
    final_answer = "\n".join(
        f"{name} = {_format_numeric(value)}" for name, value in solution.items()
    )

    # ── Verification ─────────────────────────────────────────────────
    subs = {sym: solution[sym.name] for sym in solver.symbols_for(unknowns)}
    verification_steps = [{
        "description": "Substitute into every equation",
        "expression": "Checking…",
        "explanation": "We plug the solution back into each original equation.",
    }]
    lhs_values, rhs_values = [], []
    all_exact = True
    for i, (eq_str, eq_obj) in enumerate(zip(raw_equations, eq_objects)):
        lhs_val = simplify(eq_obj.lhs.subs(subs))
        rhs_val = simplify(eq_obj.rhs.subs(subs))
        lhs_values.append(lhs_val)
        rhs_values.append(rhs_val)
        ok = simplify(lhs_val - rhs_val) == 0
        all_exact = all_exact and ok
        verification_steps.append({
            "description": f"Equation ({i + 1}): {eq_str}",
            "expression": (
                f"LHS = {sympy.sstr(lhs_val)},  RHS = {sympy.sstr(rhs_val)}"
                f"  →  {'✓' if ok else '✗'}"
            ),
            "explanation": (
                f"Both sides equal {sympy.sstr(lhs_val)}."
                if ok else "Sides differ symbolically; checking numerically."
            ),
        })

    numeric_ok = residuals_close(lhs_values, rhs_values, tolerance)
    passed = all_exact or numeric_ok
    verification_steps.append({
        "description": "Numerical check",
        "expression": (
            f"|LHS − RHS| ≤ {tolerance:g}  "
            f"{'✓' if numeric_ok else '✗'}"
        ),
        "explanation": (
            "All equations are satisfied." if passed
            else "At least one equation is not satisfied."
        ),
    })

    for i, s in enumerate(steps, 1):
        s["step_number"] = i
    for i, s in enumerate(verification_steps, 1):
        s["step_number"] = i

    t_end = time.perf_counter()
    runtime_ms = round((t_end - t_start) * 1000, 2)

    return {
        "equation": ", ".join(raw_equations),
        "given": {
            "problem": "Solve the system of equations",
            "inputs": {
                "equations": ", ".join(raw_equations),
                "number_of_equations": str(n_eq),
                "variables": ", ".join(unknowns),
                "number_of_variables": str(n_var),
            },
        },
        "method": {
            "name": "Simultaneous Solve",
            "description": (
                "Solve every equation together with SymPy and keep the "
                "single admissible solution."
            ),
            "parameters": {
                "variables": ", ".join(unknowns),
                "assumptions": "positive" if solver.positive else "none",
                "approach": "Parse → Solve → Substitute back",
            },
        },
        "steps": steps,
        "final_answer": final_answer,
        "solution": solution,
        "verification_steps": verification_steps,
        "summary": {
            "runtime_ms": runtime_ms,
            "total_steps": len(steps),
            "verification_steps": len(verification_steps),
            "validation_status": "pass" if passed else "fail",
            "timestamp": datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
            "library": f"SymPy {sympy.__version__}",
        },
    }

