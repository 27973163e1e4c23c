"""ORM Models — SQLAlchemy declarative models for all domain entities.

Invariants:
    - All models inherit from Base (db/base.py)

Design Decisions:
    - One file per entity for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from funds_transfer.models.account import Account  # noqa: F401
from funds_transfer.models.transfer import Transfer  # noqa: F401
