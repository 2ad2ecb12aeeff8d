from __future__ import annotations

import sys
from collections import Counter
from pathlib import Path
from typing import Callable, List

import pytest

BASE_DIR = Path(__file__).resolve().parent.parent
SRC_DIR = (BASE_DIR / "src").resolve()

for path in (BASE_DIR, SRC_DIR):
    if str(path) not in sys.path:
        sys.path.append(str(path))

from tests.support.harness import limit_from_env

# Caps sampled round-trip sweeps; "full" lifts the cap.
SWEEP_LIMIT_ENV = "INFIX_ROUNDTRIP_LIMIT"


def pytest_collection_modifyitems(
    session: pytest.Session,
    config: pytest.Config,
    items: List[pytest.Item],
) -> None:
    """Table-driven cases share ids by name; refuse to run if two collide."""
    del session
    del config

    counts = Counter(item.nodeid for item in items)
    duplicates = sorted(nodeid for nodeid, count in counts.items() if count > 1)
    if not duplicates:
        return

    lines = "\n".join(f"- {nodeid}" for nodeid in duplicates)
    raise pytest.UsageError(f"Duplicate pytest nodeids detected during collection:\n{lines}")


@pytest.fixture
def sweep_limit() -> Callable[[int, int, str], int]:
    """Resolve how many items a sampled sweep should check."""

    def resolve(default: int, total: int, label: str) -> int:
        limit = limit_from_env(SWEEP_LIMIT_ENV, default, total, label)
        if limit.note:
            print(limit.note)
        return limit.size

    return resolve
