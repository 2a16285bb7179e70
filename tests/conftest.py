import datetime as _dt
import logging

import pytest

from treasury_orchestrator import settings as settings_module
from treasury_orchestrator.session import TreasurySession


class FixedClock:
    """Deterministic clock; every call advances one second."""

    def __init__(self, start: _dt.datetime | None = None) -> None:
        self.now = start or _dt.datetime(2025, 8, 6, 10, 37, 1, tzinfo=_dt.timezone.utc)

    def __call__(self) -> _dt.datetime:
        current = self.now
        self.now = current + _dt.timedelta(seconds=1)
        return current


# ---------------------------------------------------------------------------
# Default settings for tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _settings(tmp_path) -> None:
    """Pin simulator settings so env / local files never leak into tests."""

    settings_module.settings.set_override(
        {"approval_required": True, "audit_export_dir": str(tmp_path / "exports")}
    )
    yield
    settings_module.settings.reset()


@pytest.fixture(autouse=True)
def _root_logging():
    """configure_logging() swaps root handlers; put the originals back."""

    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for h in list(root.handlers):
        root.removeHandler(h)
    for h in handlers:
        root.addHandler(h)
    root.setLevel(level)


@pytest.fixture()
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture()
def session(clock) -> TreasurySession:
    return TreasurySession(clock=clock, session_id="test-session")


@pytest.fixture()
def demo_session(session: TreasurySession) -> TreasurySession:
    """Operating=80,000 against a 60,000 target, audit log emptied."""
    session.load_demo_scenario()
    session.clear_audit_log()
    return session
