"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - Every storage method takes the scope's session as its first, mandatory argument
    - Implementations provided by shell via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - Session typed as AsyncSession: the atomic scope IS the session, so there is
      no optional "maybe a transaction" handle threading through calls
"""

from contextlib import AbstractAsyncContextManager
from datetime import datetime
from decimal import Decimal
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from funds_transfer.core.domain_types import (
    Account, AccountId, AuditEvent, BalanceChange,
    Transfer, TransferId, TransferStatus,
)


class AccountStore(Protocol):
    """Contract for account persistence with version-checked writes."""
    async def get(self, db: AsyncSession, account_id: AccountId) -> Account | None: ...
    async def get_or_fail(self, db: AsyncSession, account_id: AccountId) -> Account: ...
    async def conditional_update(
        self,
        db: AsyncSession,
        account_id: AccountId,
        expected_version: int,
        new_balance: Decimal,
    ) -> int: ...
    async def apply_transfer(
        self,
        db: AsyncSession,
        source: Account,
        destination: Account,
        amount: Decimal,
    ) -> list[BalanceChange]: ...


class TransferRepository(Protocol):
    """Contract for transfer persistence — no business rules."""
    async def create(
        self,
        db: AsyncSession,
        *,
        source_account_id: AccountId,
        destination_account_id: AccountId,
        amount: Decimal,
        status: TransferStatus,
    ) -> Transfer: ...
    async def get(self, db: AsyncSession, transfer_id: TransferId) -> Transfer | None: ...
    async def list_by_participant(
        self, db: AsyncSession, account_id: AccountId,
    ) -> list[Transfer]: ...
    async def update_status(
        self,
        db: AsyncSession,
        transfer_id: TransferId,
        status: TransferStatus,
        *,
        expected_status: TransferStatus | None = None,
    ) -> Transfer | None: ...


class AtomicScope(Protocol):
    """All-or-nothing execution wrapper yielding the session to thread through calls."""
    def atomic(self) -> AbstractAsyncContextManager[AsyncSession]: ...


class AuditRecorder(Protocol):
    """Fire-and-forget audit sink. Must never raise into the caller."""
    def record(self, event: AuditEvent) -> None: ...


class Clock(Protocol):
    def now(self) -> datetime: ...
