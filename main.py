"""
PoolCalc — Entry point.

Solve the pool reserve equations and print how much ETH and DAI the
pool holds.
"""

import sys

from poolcalc import engine, report
from poolcalc import settings as config


def main() -> int:
    try:
        settings = config.get_settings()
        solver = report.pool_solver(settings)
        result = engine.solve_system(
            report.POOL_EQUATIONS, report.POOL_UNKNOWNS, solver,
            tolerance=settings["tolerance"],
        )
        if result["summary"]["validation_status"] != "pass":
            raise engine.UnsolvableError(
                "The solution does not satisfy the pool equations."
            )
        lines = report.render_lines(result["solution"], settings)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    for line in lines:
        print(line)
    return 0


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
