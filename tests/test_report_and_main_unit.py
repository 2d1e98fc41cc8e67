import pytest
import sympy

import main as entry
from poolcalc import report, settings
from poolcalc.engine import MissingUnknownError, Solution, evaluate

EXPECTED_LINES = [
    "池子中 ETH 的数量：0.8164965809",
    "池子中 DAI 的数量：122.4744871392",
]


def _pool_solution() -> Solution:
    return evaluate(report.POOL_EQUATIONS, report.POOL_UNKNOWNS, report.pool_solver())


def test_pool_solver_follows_settings() -> None:
    assert report.pool_solver().positive is True
    assert report.pool_solver({"positive_unknowns": False}).positive is False


def test_render_lines_numeric() -> None:
    assert report.render_lines(_pool_solution()) == EXPECTED_LINES


def test_render_lines_match_solution_values() -> None:
    sol = _pool_solution()
    lines = report.render_lines(sol, {"output_mode": "numeric", "max_decimals": 10})
    values = [float(line.split("：")[1]) for line in lines]
    assert values[0] == pytest.approx(float(sol["x"]), abs=1e-9)
    assert values[1] == pytest.approx(float(sol["y"]), abs=1e-9)


def test_render_lines_exact() -> None:
    lines = report.render_lines(_pool_solution(), {"output_mode": "exact"})
    assert lines == ["池子中 ETH 的数量：sqrt(6)/3", "池子中 DAI 的数量：50*sqrt(6)"]


def test_render_lines_unknown_mode() -> None:
    with pytest.raises(ValueError, match="Unknown output_mode"):
        report.render_lines(_pool_solution(), {"output_mode": "hex"})


def test_render_lines_missing_unknown() -> None:
    sol = Solution(x=sympy.Integer(1))
    with pytest.raises(MissingUnknownError, match="'y'"):
        report.render_lines(sol)


def test_main_prints_pool_reserves(capsys) -> None:
    assert entry.main() == 0
    captured = capsys.readouterr()
    assert captured.out.splitlines() == EXPECTED_LINES
    assert captured.err == ""


def test_main_reports_unsolvable_system(monkeypatch, capsys) -> None:
    monkeypatch.setattr(report, "POOL_EQUATIONS", ("x + y = 1", "x + y = 2"))
    assert entry.main() == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err.startswith("Error: No solution")


def test_main_reports_parse_error(monkeypatch, capsys) -> None:
    monkeypatch.setattr(report, "POOL_EQUATIONS", ("(x * y = 100", "x / y = 1/150"))
    assert entry.main() == 1
    assert "Unbalanced parentheses" in capsys.readouterr().err


def test_main_honours_settings_file(capsys) -> None:
    settings.save_settings({"positive_unknowns": False})
    assert entry.main() == 1
    assert "not unique" in capsys.readouterr().err


def test_main_reports_bad_settings_type(capsys) -> None:
    settings.save_settings({"tolerance": "1e-9"})
    assert entry.main() == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err.startswith("Error: Setting 'tolerance'")


def test_run_exits_with_status(capsys) -> None:
    with pytest.raises(SystemExit) as exc:
        entry.run()
    assert exc.value.code == 0
