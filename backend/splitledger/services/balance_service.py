import uuid
from collections import defaultdict
from decimal import Decimal
from typing import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from splitledger.models.expense import Expense, ExpenseSplit
from splitledger.schemas.ledger import (
    ExpenseRecord,
    ExpenseSplitRecord,
    GroupSnapshot,
    MemberBalance,
)
from splitledger.services.calculation_service import get_group_snapshot
from splitledger.utils.currency_utils import round_to_cent


def compute_balance(
    member_id: uuid.UUID,
    group_id: uuid.UUID,
    expenses: Iterable[ExpenseRecord],
    splits: Iterable[ExpenseSplitRecord],
) -> Decimal:
    """
    Net balance of one member within one group: total paid minus total owed.
    Positive = owed by others; negative = owes others.

    Only expenses of `group_id` count, and only splits hanging off those
    expenses, so rows from other groups passed in by mistake are ignored.
    """
    group_expense_ids = set()
    total_paid = Decimal("0")
    for expense in expenses:
        if expense.group_id != group_id:
            continue
        group_expense_ids.add(expense.id)
        if expense.paid_by == member_id:
            total_paid += expense.amount

    total_owed = Decimal("0")
    for split in splits:
        if split.member_id == member_id and split.expense_id in group_expense_ids:
            total_owed += split.amount

    return round_to_cent(total_paid - total_owed)


def compute_group_balances(snapshot: GroupSnapshot) -> list[MemberBalance]:
    """
    Balance of every member of the snapshot, in membership order. Payers or
    participants that are no longer members are appended after them so the
    balances still sum to zero.
    """
    expense_ids = {e.id for e in snapshot.expenses if e.group_id == snapshot.group_id}

    net = defaultdict(Decimal)
    for expense in snapshot.expenses:
        if expense.id in expense_ids:
            net[expense.paid_by] += expense.amount
    for split in snapshot.splits:
        if split.expense_id in expense_ids:
            net[split.member_id] -= split.amount

    names = {m.id: m.name for m in snapshot.members}
    ordered_ids = [m.id for m in snapshot.members]
    ordered_ids += [uid for uid in net if uid not in names]

    return [
        MemberBalance(id=uid, name=names.get(uid, "Unknown"), balance=round_to_cent(net.get(uid, Decimal("0"))))
        for uid in ordered_ids
    ]


async def get_member_balance(db: AsyncSession, member_id: uuid.UUID, group_id: uuid.UUID) -> Decimal:
    snapshot = await get_group_snapshot(db, group_id)
    return compute_balance(member_id, group_id, snapshot.expenses, snapshot.splits)


async def get_group_balances(db: AsyncSession, group_id: uuid.UUID) -> list[MemberBalance]:
    snapshot = await get_group_snapshot(db, group_id)
    return compute_group_balances(snapshot)


def compute_user_summary(
    user_id: uuid.UUID,
    expenses: Iterable[ExpenseRecord],
    splits: Iterable[ExpenseSplitRecord],
) -> dict:
    """
    Net position of a user across every group they belong to, split into what
    others owe them (`owed`) and what they owe others (`owing`). At most one of
    the two is non-zero.
    """
    total_paid = Decimal("0")
    for expense in expenses:
        if expense.paid_by == user_id:
            total_paid += expense.amount

    total_owed = Decimal("0")
    for split in splits:
        if split.member_id == user_id:
            total_owed += split.amount

    net = round_to_cent(total_paid - total_owed)
    return {
        "owed": net if net > 0 else Decimal("0.00"),
        "owing": -net if net < 0 else Decimal("0.00"),
    }


async def get_user_balance_summary(db: AsyncSession, user_id: uuid.UUID) -> dict:
    paid_result = await db.execute(
        select(Expense.id, Expense.group_id, Expense.amount, Expense.paid_by, Expense.split_count)
        .where(Expense.paid_by == user_id)
    )
    splits_result = await db.execute(
        select(ExpenseSplit.expense_id, ExpenseSplit.user_id, ExpenseSplit.amount)
        .where(ExpenseSplit.user_id == user_id)
    )

    expenses = [
        ExpenseRecord(id=eid, group_id=gid, amount=amount, paid_by=paid_by, split_count=split_count)
        for eid, gid, amount, paid_by, split_count in paid_result.all()
    ]
    splits = [
        ExpenseSplitRecord(expense_id=expense_id, member_id=uid, amount=amount)
        for expense_id, uid, amount in splits_result.all()
    ]
    return compute_user_summary(user_id, expenses, splits)
