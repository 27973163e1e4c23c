"""Transfer Store — SQLAlchemy persistence for transfer records.

Invariants:
    - Carries no business rules: every invariant is checked by the orchestrator first
    - list_by_participant returns newest first (created_at DESC, id as tie-breaker)
    - Reads project both parties' identity (id, name, email); create() does not
    - update_status with expected_status is a compare-and-set: returns None when the
      row had already moved on

Design Decisions:
    - selectinload per query over eager relationships on the model: identity is only
      loaded where a caller asked for it
    - Timestamps come from the injected clock so ordering is testable
"""

from decimal import Decimal

from sqlalchemy import or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from funds_transfer.core.domain_types import (
    CENTS, AccountId, Party, Transfer, TransferId, TransferStatus,
)
from funds_transfer.core.repository_protocols import Clock
from funds_transfer.infrastructure.clock import SystemClock, as_utc
from funds_transfer.models.account import Account as AccountModel
from funds_transfer.models.transfer import Transfer as TransferModel

_WITH_PARTIES = (
    selectinload(TransferModel.source_account),
    selectinload(TransferModel.destination_account),
)


class SqlTransferStore:
    """Transfer repository backed by SQLAlchemy models."""

    def __init__(self, clock: Clock | None = None) -> None:
        self._clock = clock or SystemClock()

    async def create(
        self,
        db: AsyncSession,
        *,
        source_account_id: AccountId,
        destination_account_id: AccountId,
        amount: Decimal,
        status: TransferStatus,
    ) -> Transfer:
        now = self._clock.now()
        model = TransferModel(
            source_account_id=source_account_id,
            destination_account_id=destination_account_id,
            amount=amount,
            status=status.value,
            created_at=now,
            updated_at=now,
        )
        db.add(model)
        await db.flush()
        return self._to_domain(model, with_parties=False)

    async def get(self, db: AsyncSession, transfer_id: TransferId) -> Transfer | None:
        result = await db.execute(
            select(TransferModel)
            .where(TransferModel.id == transfer_id)
            .options(*_WITH_PARTIES)
            .execution_options(populate_existing=True),
        )
        model = result.scalar_one_or_none()
        if model is None:
            return None
        return self._to_domain(model)

    async def list_by_participant(
        self, db: AsyncSession, account_id: AccountId,
    ) -> list[Transfer]:
        result = await db.execute(
            select(TransferModel)
            .where(or_(
                TransferModel.source_account_id == account_id,
                TransferModel.destination_account_id == account_id,
            ))
            .order_by(TransferModel.created_at.desc(), TransferModel.id.desc())
            .options(*_WITH_PARTIES),
        )
        return [self._to_domain(model) for model in result.scalars().all()]

    async def update_status(
        self,
        db: AsyncSession,
        transfer_id: TransferId,
        status: TransferStatus,
        *,
        expected_status: TransferStatus | None = None,
    ) -> Transfer | None:
        stmt = update(TransferModel).where(TransferModel.id == transfer_id)
        if expected_status is not None:
            stmt = stmt.where(TransferModel.status == expected_status.value)
        result = await db.execute(
            stmt.values(status=status.value, updated_at=self._clock.now())
            .execution_options(synchronize_session=False),
        )
        if result.rowcount == 0:
            return None
        return await self.get(db, transfer_id)

    @staticmethod
    def _to_domain(model: TransferModel, with_parties: bool = True) -> Transfer:
        return Transfer(
            id=TransferId(model.id),
            source_account_id=AccountId(model.source_account_id),
            destination_account_id=AccountId(model.destination_account_id),
            amount=Decimal(model.amount).quantize(CENTS),
            status=TransferStatus(model.status),
            created_at=as_utc(model.created_at),
            updated_at=as_utc(model.updated_at),
            source=_party(model.source_account) if with_parties else None,
            destination=_party(model.destination_account) if with_parties else None,
        )


def _party(model: AccountModel | None) -> Party | None:
    if model is None:
        return None
    return Party(id=AccountId(model.id), name=model.name, email=model.email)
