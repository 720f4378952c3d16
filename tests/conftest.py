from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable, Dict, List

import pytest

BASE_DIR = Path(__file__).resolve().parent.parent
SRC_DIR = (BASE_DIR / "src").resolve()

if str(BASE_DIR) not in sys.path:
    sys.path.append(str(BASE_DIR))
if str(SRC_DIR) not in sys.path:
    sys.path.append(str(SRC_DIR))


@pytest.fixture(autouse=True)
def _clean_basil_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the caller's BASIL_* settings out of every test."""
    monkeypatch.delenv("BASIL_MAX_DEPTH", raising=False)
    monkeypatch.delenv("BASIL_DEBUG_PY_TRACE", raising=False)


@pytest.fixture
def basil_file(tmp_path: Path) -> Callable[[str], Path]:
    """Write a source string to a `.bs` file and return its path."""

    def write(source: str, name: str = "prog.bs") -> Path:
        path = tmp_path / name
        path.write_text(source, encoding="utf-8")
        return path

    return write


def pytest_collection_modifyitems(
    session: pytest.Session,
    config: pytest.Config,
    items: List[pytest.Item],
) -> None:
    """Fail fast if two parametrized scenarios share an id."""
    del session
    del config

    seen: Dict[str, int] = {}
    duplicates: List[str] = []
    for item in items:
        if item.nodeid in seen:
            duplicates.append(item.nodeid)
            continue
        seen[item.nodeid] = 1

    if not duplicates:
        return

    lines = "\n".join(f"- {nodeid}" for nodeid in sorted(set(duplicates)))
    raise pytest.UsageError(f"Duplicate pytest nodeids detected during collection:\n{lines}")
