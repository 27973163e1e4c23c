"""Transfer Schemas — Pydantic models with field-level validation for API boundaries.

Invariants:
    - TransferCreate.amount: > 0, <= 999,999,999.99, at most 2 decimal places
    - Responses serialize money as exact decimal strings
    - Same-account requests are NOT rejected here: the core owns that rule

Design Decisions:
    - from_attributes: responses are built straight from the core's frozen records
"""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from funds_transfer.core.domain_types import TransferStatus


class TransferCreate(BaseModel):
    """Transfer creation request."""
    source_account_id: UUID
    destination_account_id: UUID
    amount: Decimal = Field(gt=0, le=Decimal("999999999.99"), decimal_places=2)


class PartyResponse(BaseModel):
    """Identity of one side of a transfer."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    email: str


class TransferResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    source_account_id: UUID
    destination_account_id: UUID
    amount: Decimal
    status: TransferStatus
    created_at: datetime
    updated_at: datetime
    source: PartyResponse | None = None
    destination: PartyResponse | None = None


class TransferHistoryResponse(BaseModel):
    """History split by direction relative to account_id."""
    model_config = ConfigDict(from_attributes=True)

    account_id: UUID
    sent: list[TransferResponse]
    received: list[TransferResponse]


class AccountBalanceResponse(BaseModel):
    account_id: UUID
    balance: Decimal
    version: int
