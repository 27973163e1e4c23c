"""Transfer Rules — pure validation, threshold and state-machine decisions.

Invariants:
    - Every function here is PURE: no IO, no clock, no session
    - Amounts leave normalize_amount() as Decimals quantized to cents, strictly positive
    - amount <= threshold is auto-approved; amount > threshold waits for manual review
    - Only PENDING transfers may transition; APPROVED and REJECTED are terminal
    - A debit never produces a negative balance

Design Decisions:
    - Rules raise typed errors instead of returning descriptors: the orchestrator
      runs them inside an atomic scope, and raising is what rolls the scope back
    - Threshold passed in, not read from settings: keeps the core free of config IO
"""

from collections.abc import Iterable
from decimal import Decimal, InvalidOperation

from funds_transfer.core.domain_types import (
    CENTS, MAX_TRANSFER_AMOUNT,
    Account, AccountId, Transfer, TransferHistory, TransferStatus,
)
from funds_transfer.core.errors import (
    InsufficientFundsError, InvalidStateError, ValidationError,
)


def normalize_amount(amount: Decimal | int | str) -> Decimal:
    """Coerce to a cent-precise Decimal, rejecting anything that is not a positive amount."""
    if isinstance(amount, float):
        amount = str(amount)
    try:
        value = Decimal(amount)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"Amount '{amount}' is not a number", "amount")
    if not value.is_finite():
        raise ValidationError("Amount must be a finite number", "amount")
    if value <= 0:
        raise ValidationError("Amount must be positive", "amount")
    if value > MAX_TRANSFER_AMOUNT:
        raise ValidationError("Amount exceeds maximum limit", "amount")
    if value != value.quantize(CENTS):
        raise ValidationError("Amount cannot have more than 2 decimal places", "amount")
    return value.quantize(CENTS)


def validate_transfer_request(
    source_id: AccountId, destination_id: AccountId, amount: Decimal | int | str,
) -> Decimal:
    """Check the request-level invariants. Returns the normalized amount."""
    if source_id == destination_id:
        raise ValidationError(
            "Cannot create a transfer to the same account", "destination_account_id",
        )
    return normalize_amount(amount)


def decide_initial_status(amount: Decimal, threshold: Decimal) -> TransferStatus:
    """Threshold rule: at or below is approved on creation, above is held for review."""
    if amount <= threshold:
        return TransferStatus.APPROVED
    return TransferStatus.PENDING


def ensure_sufficient_funds(account: Account, amount: Decimal) -> None:
    if account.balance < amount:
        raise InsufficientFundsError(str(account.id), account.balance, amount)


def ensure_pending(transfer: Transfer, action: str) -> None:
    """State machine guard: no transition leaves a terminal state."""
    if transfer.status != TransferStatus.PENDING:
        raise InvalidStateError(str(transfer.id), transfer.status.value, action)


def debit(account: Account, amount: Decimal) -> Decimal:
    new_balance = (account.balance - amount).quantize(CENTS)
    if new_balance < 0:
        raise InsufficientFundsError(str(account.id), account.balance, amount)
    return new_balance


def credit(account: Account, amount: Decimal) -> Decimal:
    return (account.balance + amount).quantize(CENTS)


def partition_history(
    account_id: AccountId, transfers: Iterable[Transfer],
) -> TransferHistory:
    """Split an already-ordered transfer list by direction relative to account_id."""
    sent: list[Transfer] = []
    received: list[Transfer] = []
    for transfer in transfers:
        if transfer.source_account_id == account_id:
            sent.append(transfer)
        if transfer.destination_account_id == account_id:
            received.append(transfer)
    return TransferHistory(account_id=account_id, sent=sent, received=received)
