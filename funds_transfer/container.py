"""Service Container — wires the transfer engine's collaborators once per process.

Invariants:
    - Exactly one DatabaseSessionManager per container; every service shares it
    - No module-level instances: callers hold the container they built

Design Decisions:
    - Plain dataclass over a DI framework: four collaborators, explicit wiring reads better
"""

from __future__ import annotations

from dataclasses import dataclass

from funds_transfer.config import Settings
from funds_transfer.core.repository_protocols import AuditRecorder, Clock
from funds_transfer.infrastructure.audit import LoggingAuditRecorder
from funds_transfer.infrastructure.clock import SystemClock
from funds_transfer.infrastructure.database import DatabaseSessionManager
from funds_transfer.services.account_ledger import AccountLedger
from funds_transfer.services.transfer_orchestrator import TransferOrchestrator
from funds_transfer.services.transfer_store import SqlTransferStore


@dataclass(slots=True)
class ServiceContainer:
    db: DatabaseSessionManager
    ledger: AccountLedger
    transfers: SqlTransferStore
    orchestrator: TransferOrchestrator

    async def close(self) -> None:
        await self.db.dispose()


def build_container(
    settings: Settings,
    *,
    db: DatabaseSessionManager | None = None,
    clock: Clock | None = None,
    audit: AuditRecorder | None = None,
) -> ServiceContainer:
    """Construct every service from settings; db/clock/audit may be supplied by tests."""
    clock = clock or SystemClock()
    db = db or DatabaseSessionManager(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
        conflict_retry_after_ms=settings.conflict_retry_after_ms,
    )
    ledger = AccountLedger(
        clock, conflict_retry_after_ms=settings.conflict_retry_after_ms,
    )
    transfers = SqlTransferStore(clock)
    orchestrator = TransferOrchestrator(
        db,
        ledger,
        transfers,
        audit or LoggingAuditRecorder(),
        auto_approve_threshold=settings.auto_approve_threshold,
        currency=settings.currency,
    )
    return ServiceContainer(
        db=db, ledger=ledger, transfers=transfers, orchestrator=orchestrator,
    )
