"""Account Ledger — balance reads, version-checked writes, and the balance-mutation protocol.

Invariants:
    - conditional_update is the ONLY code path that writes balance or version
    - A write matches (id, expected_version) and sets version = expected_version + 1
    - Zero matched rows means a concurrent writer won: ConcurrencyConflictError, no retry
    - apply_transfer debits the source before crediting the destination, in the caller's scope
    - get() always re-reads the row (populate_existing): snapshots never come from a stale
      identity map

Design Decisions:
    - Bulk UPDATE with synchronize_session=False: the ledger works with frozen snapshots,
      so there is no in-session object to keep in sync
    - Retry policy belongs to the caller; the conflict error carries a retry_after_ms hint
"""

import logging
from decimal import Decimal

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from funds_transfer.core.domain_types import (
    CENTS, Account, AccountId, BalanceChange,
)
from funds_transfer.core.errors import ConcurrencyConflictError, NotFoundError
from funds_transfer.core.repository_protocols import Clock
from funds_transfer.core.transfer_rules import credit, debit
from funds_transfer.infrastructure.clock import SystemClock, as_utc
from funds_transfer.models.account import Account as AccountModel

logger = logging.getLogger(__name__)


class AccountLedger:
    """Owns account balance/version state."""

    def __init__(
        self,
        clock: Clock | None = None,
        conflict_retry_after_ms: int | None = None,
    ) -> None:
        self._clock = clock or SystemClock()
        self._retry_after_ms = conflict_retry_after_ms

    async def get(self, db: AsyncSession, account_id: AccountId) -> Account | None:
        result = await db.execute(
            select(AccountModel)
            .where(AccountModel.id == account_id)
            .execution_options(populate_existing=True),
        )
        return self._to_domain(result.scalar_one_or_none())

    async def get_or_fail(self, db: AsyncSession, account_id: AccountId) -> Account:
        account = await self.get(db, account_id)
        if account is None:
            raise NotFoundError("Account", str(account_id))
        return account

    async def open_account(
        self,
        db: AsyncSession,
        *,
        name: str,
        email: str,
        balance: Decimal = Decimal("0.00"),
    ) -> Account:
        """Insert a new account at version 0."""
        now = self._clock.now()
        model = AccountModel(
            name=name,
            email=email,
            balance=Decimal(balance).quantize(CENTS),
            version=0,
            created_at=now,
            updated_at=now,
        )
        db.add(model)
        await db.flush()
        return self._to_domain(model)

    async def conditional_update(
        self,
        db: AsyncSession,
        account_id: AccountId,
        expected_version: int,
        new_balance: Decimal,
    ) -> int:
        """Write balance only if the row is still at expected_version. Returns rows affected."""
        result = await db.execute(
            update(AccountModel)
            .where(
                AccountModel.id == account_id,
                AccountModel.version == expected_version,
            )
            .values(
                balance=new_balance,
                version=expected_version + 1,
                updated_at=self._clock.now(),
            )
            .execution_options(synchronize_session=False),
        )
        return result.rowcount

    async def apply_transfer(
        self,
        db: AsyncSession,
        source: Account,
        destination: Account,
        amount: Decimal,
    ) -> list[BalanceChange]:
        """Balance-mutation protocol: debit source, then credit destination.

        Both snapshots must have been read in the same scope as ``db``. Any
        conflict raises and leaves rollback of the whole scope to the caller.
        """
        legs = (
            (source, debit(source, amount)),
            (destination, credit(destination, amount)),
        )
        changes: list[BalanceChange] = []
        for account, new_balance in legs:
            affected = await self.conditional_update(
                db, account.id, account.version, new_balance,
            )
            if affected == 0:
                logger.warning(
                    f"Version conflict on account {account.id} "
                    f"(expected version {account.version})",
                    extra={"account_id": str(account.id), "error_code": "CONCURRENCY_CONFLICT"},
                )
                raise ConcurrencyConflictError(
                    str(account.id), account.version, self._retry_after_ms,
                )
            changes.append(BalanceChange(
                account_id=account.id,
                previous_balance=account.balance,
                new_balance=new_balance,
                new_version=account.version + 1,
            ))
        return changes

    @staticmethod
    def _to_domain(model: AccountModel | None) -> Account | None:
        if model is None:
            return None
        return Account(
            id=AccountId(model.id),
            name=model.name,
            email=model.email,
            balance=Decimal(model.balance).quantize(CENTS),
            version=model.version,
            created_at=as_utc(model.created_at),
            updated_at=as_utc(model.updated_at),
        )
