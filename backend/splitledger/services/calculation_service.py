import logging
import uuid
from collections import defaultdict
from typing import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from splitledger.core.errors import DataConsistencyFault
from splitledger.models.expense import Expense, ExpenseSplit
from splitledger.models.group import GroupMember
from splitledger.models.user import User
from splitledger.schemas.ledger import (
    ExpenseRecord,
    ExpenseSplitRecord,
    GroupSnapshot,
    MemberRecord,
)
from splitledger.utils.currency_utils import from_cents, to_cents

logger = logging.getLogger(__name__)


async def get_group_snapshot(db: AsyncSession, group_id: uuid.UUID) -> GroupSnapshot:
    """
    Read members, expenses and expense splits of a group.
    The three queries go through the caller's session, so wrapping the call in
    one transaction gives a consistent view.
    """
    members_result = await db.execute(
        select(GroupMember.user_id, User.display_name, GroupMember.role)
        .outerjoin(User, User.id == GroupMember.user_id)
        .where(GroupMember.group_id == group_id)
        .order_by(GroupMember.joined_at, GroupMember.user_id)
    )

    expenses_result = await db.execute(
        select(
            Expense.id,
            Expense.group_id,
            Expense.description,
            Expense.amount,
            Expense.paid_by,
            Expense.split_count,
            Expense.created_at,
        )
        .where(Expense.group_id == group_id)
        .order_by(Expense.created_at, Expense.id)
    )

    splits_result = await db.execute(
        select(ExpenseSplit.id, ExpenseSplit.expense_id, ExpenseSplit.user_id, ExpenseSplit.amount)
        .join(Expense, Expense.id == ExpenseSplit.expense_id)
        .where(Expense.group_id == group_id)
    )

    members = [
        MemberRecord(id=user_id, name=display_name or "Unknown", role=role)
        for user_id, display_name, role in members_result.all()
    ]
    expenses = [
        ExpenseRecord(
            id=row.id,
            group_id=row.group_id,
            description=row.description,
            amount=row.amount,
            paid_by=row.paid_by,
            split_count=row.split_count,
            created_at=row.created_at,
        )
        for row in expenses_result.all()
    ]
    splits = [
        ExpenseSplitRecord(id=split_id, expense_id=expense_id, member_id=user_id, amount=amount)
        for split_id, expense_id, user_id, amount in splits_result.all()
    ]

    return GroupSnapshot(group_id=group_id, members=members, expenses=expenses, splits=splits)


def check_split_integrity(
    expenses: Iterable[ExpenseRecord],
    splits: Iterable[ExpenseSplitRecord],
) -> None:
    """Raise DataConsistencyFault if any expense's splits don't add up to its amount."""
    split_cents = defaultdict(int)
    split_counts = defaultdict(int)
    for split in splits:
        split_cents[split.expense_id] += to_cents(split.amount)
        split_counts[split.expense_id] += 1

    for expense in expenses:
        if split_counts[expense.id] == 0:
            logger.warning(f"Expense {expense.id} has no splits")
            raise DataConsistencyFault(f"Expense {expense.id} has no splits")
        diff = to_cents(expense.amount) - split_cents[expense.id]
        if diff != 0:
            logger.warning(f"Splits of expense {expense.id} are off by {diff} cents")
            raise DataConsistencyFault(
                f"Splits of expense {expense.id} do not sum to its amount",
                discrepancy=from_cents(diff),
            )
