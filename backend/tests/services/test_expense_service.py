import uuid
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock
import pytest

from splitledger.core.errors import InvalidInput
from splitledger.schemas.ledger import ExpenseCreate
from splitledger.services.expense_service import build_expense, create_expense

GROUP_ID = uuid.uuid4()
ALICE = uuid.uuid4()
BOB = uuid.uuid4()
CHARLIE = uuid.uuid4()
STRANGER = uuid.uuid4()


def make_request(amount="10.00", participants=None, paid_by=ALICE, description="Groceries"):
    return ExpenseCreate(
        group_id=GROUP_ID,
        description=description,
        amount=Decimal(amount),
        paid_by=paid_by,
        participant_ids=participants if participants is not None else [ALICE, BOB, CHARLIE],
    )


def make_db(member_ids):
    """Mock AsyncSession whose membership query returns member_ids."""
    db = AsyncMock()
    db.add = MagicMock()
    db.add_all = MagicMock()
    result = MagicMock()
    result.scalars.return_value.all.return_value = list(member_ids)
    db.execute.return_value = result
    return db


def test_build_expense_distributes_cents():
    expense, splits = build_expense(make_request())
    assert expense.amount == Decimal("10.00")
    assert expense.split_count == 3
    assert [(s.user_id, s.amount) for s in splits] == [
        (ALICE, Decimal("3.34")),
        (BOB, Decimal("3.33")),
        (CHARLIE, Decimal("3.33")),
    ]
    assert all(s.expense_id == expense.id for s in splits)


def test_build_expense_rounds_amount():
    expense, splits = build_expense(make_request(amount="0.105", participants=[ALICE, BOB]))
    assert expense.amount == Decimal("0.11")
    assert sum(s.amount for s in splits) == Decimal("0.11")


@pytest.mark.parametrize("kwargs", [
    {"participants": []},
    {"amount": "0"},
    {"amount": "-4.00"},
    {"participants": [ALICE, ALICE]},
    {"description": "   "},
])
def test_build_expense_rejects(kwargs):
    with pytest.raises(InvalidInput):
        build_expense(make_request(**kwargs))


@pytest.mark.asyncio
async def test_create_expense_persists_expense_and_splits():
    db = make_db([ALICE, BOB, CHARLIE])
    expense = await create_expense(db, make_request())

    db.add.assert_called_once_with(expense)
    db.flush.assert_awaited_once()
    (splits,), _ = db.add_all.call_args
    assert sum(s.amount for s in splits) == Decimal("10.00")
    db.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_create_expense_payer_must_be_member():
    db = make_db([BOB, CHARLIE])
    with pytest.raises(InvalidInput, match="Payer"):
        await create_expense(db, make_request(participants=[BOB, CHARLIE]))
    db.commit.assert_not_awaited()


@pytest.mark.asyncio
async def test_create_expense_participants_must_be_members():
    db = make_db([ALICE, BOB])
    with pytest.raises(InvalidInput, match="not group members"):
        await create_expense(db, make_request(participants=[BOB, STRANGER]))
    db.add.assert_not_called()
