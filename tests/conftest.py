import sys
from pathlib import Path

import pytest

# Ensure `import fieldgate` works when running `pytest` without needing PYTHONPATH hacks.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT))

from tests.helpers._builders import TickingClock  # noqa: E402


@pytest.fixture
def clock(monkeypatch) -> TickingClock:
    ticking = TickingClock()
    monkeypatch.setattr("fieldgate.core.clock.utcnow", ticking)
    return ticking


@pytest.fixture(autouse=True)
def _no_gateway(monkeypatch) -> None:
    monkeypatch.delenv("FIELDGATE_GATEWAY_URL", raising=False)
    monkeypatch.delenv("JOB_STORE_PATH", raising=False)
