"""Transfer Orchestrator — create / approve / reject / history for funds transfers.

Invariants:
    - Every write path runs inside exactly one atomic scope; an error anywhere in it
      rolls back the transfer record, the status change and both balance legs
    - Failed validation or insufficient funds never persists a transfer record
    - PENDING -> APPROVED applies the balance mutation; PENDING -> REJECTED never does
    - Status changes are compare-and-set on PENDING: two racing approvals cannot both win
    - Audit events are recorded only after the scope commits; a failing recorder
      is logged and never turns a committed operation into an error
    - No retries here; ConcurrencyConflictError goes straight back to the caller

Design Decisions:
    - Collaborators injected through __init__: built once in the app lifespan
    - Accounts loaded sequentially: an AsyncSession does not allow concurrent operations
"""

import logging
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from funds_transfer.core.domain_types import (
    AccountId, AuditEvent, AuditEventType, BalanceChange,
    Transfer, TransferHistory, TransferId, TransferStatus,
)
from funds_transfer.core.errors import InvalidStateError, NotFoundError
from funds_transfer.core.repository_protocols import (
    AccountStore, AtomicScope, AuditRecorder, TransferRepository,
)
from funds_transfer.core.transfer_rules import (
    decide_initial_status, ensure_pending, ensure_sufficient_funds,
    partition_history, validate_transfer_request,
)

logger = logging.getLogger(__name__)


class TransferOrchestrator:
    """Coordinates the transfer lifecycle against the ledger and the transfer store."""

    def __init__(
        self,
        db: AtomicScope,
        ledger: AccountStore,
        transfers: TransferRepository,
        audit: AuditRecorder,
        *,
        auto_approve_threshold: Decimal,
        currency: str = "USD",
    ) -> None:
        self._db = db
        self._ledger = ledger
        self._transfers = transfers
        self._audit = audit
        self._threshold = Decimal(auto_approve_threshold)
        self._currency = currency

    async def create_transfer(
        self,
        source_id: AccountId,
        destination_id: AccountId,
        amount: Decimal | int | str,
    ) -> Transfer:
        """Create a transfer; amounts at or below the threshold settle immediately."""
        amount = validate_transfer_request(source_id, destination_id, amount)

        changes: list[BalanceChange] = []
        async with self._db.atomic() as db:
            source = await self._ledger.get_or_fail(db, source_id)
            destination = await self._ledger.get_or_fail(db, destination_id)
            ensure_sufficient_funds(source, amount)

            status = decide_initial_status(amount, self._threshold)
            transfer = await self._transfers.create(
                db,
                source_account_id=source.id,
                destination_account_id=destination.id,
                amount=amount,
                status=status,
            )
            if status == TransferStatus.APPROVED:
                changes = await self._ledger.apply_transfer(
                    db, source, destination, amount,
                )

        logger.info(
            f"Transfer {transfer.id} created as {transfer.status.value}",
            extra={"transfer_id": str(transfer.id), "status": transfer.status.value},
        )
        self._emit([
            self._event(AuditEventType.TRANSFER, transfer, transfer.source_account_id),
            *self._mutation_events(transfer, changes),
        ])
        return transfer

    async def get_history(self, account_id: AccountId) -> TransferHistory:
        """All transfers touching account_id, newest first, split into sent/received."""
        async with self._db.atomic() as db:
            transfers = await self._transfers.list_by_participant(db, account_id)
        return partition_history(account_id, transfers)

    async def approve(self, transfer_id: TransferId) -> Transfer:
        """Approve a pending transfer and move the funds."""
        async with self._db.atomic() as db:
            transfer = await self._get_or_fail(db, transfer_id)
            ensure_pending(transfer, "approved")

            source = await self._ledger.get_or_fail(db, transfer.source_account_id)
            destination = await self._ledger.get_or_fail(
                db, transfer.destination_account_id,
            )
            ensure_sufficient_funds(source, transfer.amount)

            changes = await self._ledger.apply_transfer(
                db, source, destination, transfer.amount,
            )
            approved = await self._transition(
                db, transfer, TransferStatus.APPROVED, "approved",
            )

        logger.info(
            f"Transfer {approved.id} approved",
            extra={"transfer_id": str(approved.id), "status": approved.status.value},
        )
        self._emit(self._mutation_events(approved, changes))
        return approved

    async def reject(self, transfer_id: TransferId) -> Transfer:
        """Reject a pending transfer. Balances are untouched."""
        async with self._db.atomic() as db:
            transfer = await self._get_or_fail(db, transfer_id)
            ensure_pending(transfer, "rejected")
            rejected = await self._transition(
                db, transfer, TransferStatus.REJECTED, "rejected",
            )

        logger.info(
            f"Transfer {rejected.id} rejected",
            extra={"transfer_id": str(rejected.id), "status": rejected.status.value},
        )
        self._emit([
            self._event(AuditEventType.REJECT, rejected, rejected.source_account_id),
        ])
        return rejected

    # ─── helpers ─────────────────────────────────────────────────

    async def _get_or_fail(self, db: AsyncSession, transfer_id: TransferId) -> Transfer:
        transfer = await self._transfers.get(db, transfer_id)
        if transfer is None:
            raise NotFoundError("Transfer", str(transfer_id))
        return transfer

    async def _transition(
        self, db: AsyncSession, transfer: Transfer, status: TransferStatus, action: str,
    ) -> Transfer:
        updated = await self._transfers.update_status(
            db, transfer.id, status, expected_status=TransferStatus.PENDING,
        )
        if updated is None:
            # lost the race to another approve/reject since the read above
            current = await self._get_or_fail(db, transfer.id)
            raise InvalidStateError(str(transfer.id), current.status.value, action)
        return updated

    def _mutation_events(
        self, transfer: Transfer, changes: list[BalanceChange],
    ) -> list[AuditEvent]:
        events = []
        for change in changes:
            kind = (
                AuditEventType.WITHDRAW
                if change.account_id == transfer.source_account_id
                else AuditEventType.DEPOSIT
            )
            events.append(self._event(kind, transfer, change.account_id, change))
        return events

    def _event(
        self,
        kind: AuditEventType,
        transfer: Transfer,
        account_id: AccountId,
        change: BalanceChange | None = None,
    ) -> AuditEvent:
        return AuditEvent(
            event=kind,
            transfer_id=transfer.id,
            account_id=account_id,
            amount=transfer.amount,
            status=transfer.status,
            currency=self._currency,
            previous_balance=change.previous_balance if change else None,
            new_balance=change.new_balance if change else None,
            metadata={
                "source_account_id": str(transfer.source_account_id),
                "destination_account_id": str(transfer.destination_account_id),
            },
        )

    def _emit(self, events: list[AuditEvent]) -> None:
        for event in events:
            try:
                self._audit.record(event)
            except Exception as e:
                logger.warning(
                    f"Audit recorder failed for transfer {event.transfer_id}: {e}",
                    extra={
                        "transfer_id": str(event.transfer_id),
                        "event": event.event.value,
                    },
                )
