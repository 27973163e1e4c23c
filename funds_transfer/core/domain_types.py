"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - AccountId and TransferId wrap UUIDs — never use bare UUID in domain logic
    - Money is always a Decimal quantized to cents
    - All valid states encoded as Enums — no raw string matching
    - Records are frozen: services return snapshots, never live ORM objects

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON and to the DB `status` column without custom encoders
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

AccountId = NewType("AccountId", UUID)
TransferId = NewType("TransferId", UUID)


# ─── Value Types ─────────────────────────────────────────────────

CENTS = Decimal("0.01")
MAX_TRANSFER_AMOUNT = Decimal("999999999.99")


# ─── Enums ───────────────────────────────────────────────────────

class TransferStatus(str, Enum):
    """Transfer lifecycle states — maps to DB `status` column."""
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


TERMINAL_STATUSES = frozenset({TransferStatus.APPROVED, TransferStatus.REJECTED})


class AuditEventType(str, Enum):
    """Audit trail event kinds."""
    TRANSFER = "transfer"
    WITHDRAW = "withdraw"
    DEPOSIT = "deposit"
    REJECT = "reject"


# ─── Records ─────────────────────────────────────────────────────

@dataclass(frozen=True, slots=True)
class Account:
    """Snapshot of an account row as read inside one scope."""
    id: AccountId
    name: str
    email: str
    balance: Decimal
    version: int
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class Party:
    """Counterpart identity projected into transfer history."""
    id: AccountId
    name: str
    email: str


@dataclass(frozen=True, slots=True)
class Transfer:
    id: TransferId
    source_account_id: AccountId
    destination_account_id: AccountId
    amount: Decimal
    status: TransferStatus
    created_at: datetime
    updated_at: datetime
    source: Party | None = None
    destination: Party | None = None


@dataclass(frozen=True, slots=True)
class TransferHistory:
    account_id: AccountId
    sent: list[Transfer] = field(default_factory=list)
    received: list[Transfer] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class BalanceChange:
    """One committed leg of the balance-mutation protocol."""
    account_id: AccountId
    previous_balance: Decimal
    new_balance: Decimal
    new_version: int


@dataclass(frozen=True, slots=True)
class AuditEvent:
    event: AuditEventType
    transfer_id: TransferId
    account_id: AccountId
    amount: Decimal
    status: TransferStatus
    currency: str
    previous_balance: Decimal | None = None
    new_balance: Decimal | None = None
    metadata: dict | None = None
