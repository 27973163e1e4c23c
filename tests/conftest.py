"""Root conftest — shared test configuration and engine fixtures.

Invariants:
    - Every test gets a fresh file-backed SQLite database under tmp_path
    - The clock advances one second per call: creation order == timestamp order
    - Audit events are captured in memory, never logged to a real sink

Design Decisions:
    - File-backed SQLite over :memory:: each atomic scope gets its own connection,
      so rollback is observable from a later scope exactly as in Postgres
"""

import os
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

# Ensure tests never reach a real database
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///test.db")

from funds_transfer.core.domain_types import AuditEvent  # noqa: E402
from funds_transfer.infrastructure.database import DatabaseSessionManager  # noqa: E402
from funds_transfer.services.account_ledger import AccountLedger  # noqa: E402
from funds_transfer.services.transfer_orchestrator import TransferOrchestrator  # noqa: E402
from funds_transfer.services.transfer_store import SqlTransferStore  # noqa: E402

THRESHOLD = Decimal("50000")


class SteppingClock:
    """Deterministic clock: each now() is one second after the previous."""

    def __init__(self, start: datetime | None = None) -> None:
        self._current = start or datetime(2026, 1, 1, tzinfo=timezone.utc)

    def now(self) -> datetime:
        self._current += timedelta(seconds=1)
        return self._current


@dataclass
class RecordingAudit:
    events: list[AuditEvent] = field(default_factory=list)

    def record(self, event: AuditEvent) -> None:
        self.events.append(event)


@pytest.fixture
async def db_manager(tmp_path):
    manager = DatabaseSessionManager(
        f"sqlite+aiosqlite:///{tmp_path / 'transfers.db'}",
        pool_size=None,
        max_overflow=None,
        conflict_retry_after_ms=50,
    )
    await manager.create_all()
    yield manager
    await manager.dispose()


@pytest.fixture
def clock():
    return SteppingClock()


@pytest.fixture
def audit():
    return RecordingAudit()


@pytest.fixture
def ledger(clock):
    return AccountLedger(clock, conflict_retry_after_ms=50)


@pytest.fixture
def transfer_store(clock):
    return SqlTransferStore(clock)


@pytest.fixture
def orchestrator(db_manager, ledger, transfer_store, audit):
    return TransferOrchestrator(
        db_manager, ledger, transfer_store, audit,
        auto_approve_threshold=THRESHOLD, currency="USD",
    )


@pytest.fixture
def make_account(db_manager, ledger):
    """Factory: open and commit an account with the given balance."""
    counter = {"n": 0}

    async def _make(name: str, balance: str | Decimal = "0.00"):
        counter["n"] += 1
        async with db_manager.atomic() as db:
            return await ledger.open_account(
                db,
                name=name,
                email=f"{name.lower().replace(' ', '.')}{counter['n']}@test.com",
                balance=Decimal(balance),
            )

    return _make


@pytest.fixture
def read_account(db_manager, ledger):
    """Fetch the committed state of an account from a fresh scope."""

    async def _read(account_id):
        async with db_manager.atomic() as db:
            return await ledger.get_or_fail(db, account_id)

    return _read
