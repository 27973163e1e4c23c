"""Account ORM — balance holder guarded by an optimistic-concurrency version counter.

Invariants:
    - id is UUID primary key (client-side default)
    - balance is Numeric(18, 2) and never negative (CHECK constraint)
    - version starts at 0 and is bumped by every successful balance write
    - balance/version are written ONLY by AccountLedger.conditional_update

Design Decisions:
    - Plain integer version column over SQLAlchemy version_id_col: the ledger issues
      its own UPDATE ... WHERE version = :expected and inspects the row count
    - name/email kept on the account: they are the identity projected into history
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import CheckConstraint, DateTime, Integer, Numeric, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from funds_transfer.db.base import Base


class Account(Base):
    """Account entity — one balance, one version counter."""
    __tablename__ = "accounts"
    __table_args__ = (
        CheckConstraint("balance >= 0", name="ck_accounts_balance_non_negative"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    balance: Mapped[Decimal] = mapped_column(
        Numeric(18, 2), nullable=False, default=Decimal("0.00"),
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
