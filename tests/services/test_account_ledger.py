"""Account Ledger — verifies version-checked writes and the balance-mutation protocol.

Invariants:
    - conditional_update bumps version by exactly one and reports rows affected
    - A write against a stale version affects zero rows
    - apply_transfer debits then credits; a conflict on either leg rolls back both
    - Balances never go negative
"""

from dataclasses import replace
from decimal import Decimal
from uuid import uuid4

import pytest

from funds_transfer.core.domain_types import AccountId
from funds_transfer.core.errors import (
    ConcurrencyConflictError, InsufficientFundsError, NotFoundError,
)


async def test_open_account_starts_at_version_zero(make_account, read_account):
    account = await make_account("Alice", "1000.00")
    stored = await read_account(account.id)
    assert stored.balance == Decimal("1000.00")
    assert stored.version == 0
    assert stored.name == "Alice"


async def test_get_missing_account_returns_none(db_manager, ledger):
    async with db_manager.atomic() as db:
        assert await ledger.get(db, AccountId(uuid4())) is None


async def test_get_or_fail_raises_not_found(db_manager, ledger):
    missing = AccountId(uuid4())
    async with db_manager.atomic() as db:
        with pytest.raises(NotFoundError) as exc:
            await ledger.get_or_fail(db, missing)
    assert exc.value.resource_type == "Account"
    assert exc.value.resource_id == str(missing)


async def test_conditional_update_bumps_version(db_manager, ledger, make_account, read_account):
    account = await make_account("Alice", "100.00")
    async with db_manager.atomic() as db:
        affected = await ledger.conditional_update(db, account.id, 0, Decimal("90.00"))
    assert affected == 1

    stored = await read_account(account.id)
    assert stored.balance == Decimal("90.00")
    assert stored.version == 1


async def test_only_one_of_two_writers_on_same_version_succeeds(
    db_manager, ledger, make_account, read_account,
):
    account = await make_account("Alice", "100.00")
    first_reader = await read_account(account.id)
    second_reader = await read_account(account.id)
    assert first_reader.version == second_reader.version == 0

    async with db_manager.atomic() as db:
        first = await ledger.conditional_update(
            db, account.id, first_reader.version, Decimal("90.00"),
        )
    async with db_manager.atomic() as db:
        second = await ledger.conditional_update(
            db, account.id, second_reader.version, Decimal("80.00"),
        )

    assert (first, second) == (1, 0)
    stored = await read_account(account.id)
    assert stored.balance == Decimal("90.00")
    assert stored.version == 1


async def test_apply_transfer_moves_funds_and_reports_changes(
    db_manager, ledger, make_account, read_account,
):
    a = await make_account("A", "1000.00")
    b = await make_account("B", "500.00")

    async with db_manager.atomic() as db:
        source = await ledger.get_or_fail(db, a.id)
        destination = await ledger.get_or_fail(db, b.id)
        changes = await ledger.apply_transfer(db, source, destination, Decimal("200.00"))

    assert [c.account_id for c in changes] == [a.id, b.id]
    assert changes[0].previous_balance == Decimal("1000.00")
    assert changes[0].new_balance == Decimal("800.00")
    assert changes[1].previous_balance == Decimal("500.00")
    assert changes[1].new_balance == Decimal("700.00")
    assert all(c.new_version == 1 for c in changes)

    assert (await read_account(a.id)).balance == Decimal("800.00")
    assert (await read_account(b.id)).balance == Decimal("700.00")


async def test_conflict_on_credit_leg_rolls_back_debit(
    db_manager, ledger, make_account, read_account,
):
    a = await make_account("A", "100.00")
    b = await make_account("B", "0.00")
    source = await read_account(a.id)
    stale_destination = await read_account(b.id)

    # another transfer credits B first
    async with db_manager.atomic() as db:
        await ledger.conditional_update(db, b.id, 0, Decimal("5.00"))

    with pytest.raises(ConcurrencyConflictError) as exc:
        async with db_manager.atomic() as db:
            await ledger.apply_transfer(db, source, stale_destination, Decimal("10.00"))

    assert exc.value.account_id == str(b.id)
    assert exc.value.stale_version == 0
    assert exc.value.context.retry_after_ms == 50

    stored_a = await read_account(a.id)
    assert stored_a.balance == Decimal("100.00")
    assert stored_a.version == 0
    assert (await read_account(b.id)).balance == Decimal("5.00")


async def test_conflict_on_debit_leg_writes_nothing(
    db_manager, ledger, make_account, read_account,
):
    a = await make_account("A", "100.00")
    b = await make_account("B", "0.00")
    source = await read_account(a.id)
    destination = await read_account(b.id)

    with pytest.raises(ConcurrencyConflictError):
        async with db_manager.atomic() as db:
            await ledger.apply_transfer(
                db, replace(source, version=source.version + 3), destination,
                Decimal("10.00"),
            )

    assert (await read_account(a.id)).version == 0
    assert (await read_account(b.id)).version == 0


async def test_apply_transfer_refuses_overdraft(
    db_manager, ledger, make_account, read_account,
):
    a = await make_account("A", "50.00")
    b = await make_account("B", "0.00")

    with pytest.raises(InsufficientFundsError):
        async with db_manager.atomic() as db:
            source = await ledger.get_or_fail(db, a.id)
            destination = await ledger.get_or_fail(db, b.id)
            await ledger.apply_transfer(db, source, destination, Decimal("100.00"))

    assert (await read_account(a.id)).balance == Decimal("50.00")
