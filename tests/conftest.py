import sys
from pathlib import Path

# Ensure the project root is on sys.path so `poolcalc` and `main` are importable
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import pytest

from poolcalc import settings


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch, tmp_path: Path):
    """Point the settings file at a per-test temp directory."""
    data_dir = tmp_path / "data"
    monkeypatch.setattr(settings, "_DATA_DIR", str(data_dir))
    monkeypatch.setattr(settings, "_DATA_FILE", str(data_dir / "poolcalc.json"))
    return data_dir / "poolcalc.json"
