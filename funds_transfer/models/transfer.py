"""Transfer ORM — persists one movement of funds between two accounts.

Invariants:
    - source_account_id != destination_account_id (CHECK constraint)
    - amount is Numeric(18, 2) and strictly positive (CHECK constraint)
    - status in {PENDING, APPROVED, REJECTED}; rows are never deleted

Design Decisions:
    - Both participant columns indexed: history queries filter on either side
    - Relationships are load-on-demand only (lazy="raise"): the store opts in with
      selectinload when it projects counterpart identity, never by accident
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint, DateTime, ForeignKey, Numeric, String, Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from funds_transfer.db.base import Base


class Transfer(Base):
    """Transfer entity — references exactly two accounts."""
    __tablename__ = "transfers"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_transfers_amount_positive"),
        CheckConstraint(
            "source_account_id <> destination_account_id",
            name="ck_transfers_distinct_accounts",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4,
    )
    source_account_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("accounts.id"), nullable=False, index=True,
    )
    destination_account_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("accounts.id"), nullable=False, index=True,
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="PENDING",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        index=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    source_account: Mapped["Account"] = relationship(
        "Account", foreign_keys=[source_account_id], lazy="raise",
    )
    destination_account: Mapped["Account"] = relationship(
        "Account", foreign_keys=[destination_account_id], lazy="raise",
    )
