import logging
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from splitledger.core.errors import InvalidInput
from splitledger.models.expense import Expense, ExpenseSplit
from splitledger.models.group import GroupMember
from splitledger.schemas.ledger import ExpenseCreate, ExpenseRecord, ExpenseSplitRecord
from splitledger.services.calculation_service import check_split_integrity
from splitledger.utils.currency_utils import compute_shares, round_to_cent

logger = logging.getLogger(__name__)


def build_expense(data: ExpenseCreate) -> tuple[Expense, list[ExpenseSplit]]:
    """
    Validate an expense request and produce the expense row with its split
    rows, amounts distributed to the cent in participant order. Nothing is
    written; the caller persists both together.
    """
    if not data.participant_ids:
        raise InvalidInput("An expense needs at least one participant")
    amount = round_to_cent(data.amount)
    if amount <= 0:
        raise InvalidInput(f"Expense amount must be positive, got {data.amount}")
    if not data.description.strip():
        raise InvalidInput("Expense description is required")

    shares = compute_shares(amount, data.participant_ids)

    expense = Expense(
        id=uuid.uuid4(),
        group_id=data.group_id,
        description=data.description.strip(),
        amount=amount,
        paid_by=data.paid_by,
        split_count=len(shares),
    )
    splits = [
        ExpenseSplit(id=uuid.uuid4(), expense_id=expense.id, user_id=user_id, amount=share)
        for user_id, share in shares.items()
    ]

    check_split_integrity(
        [ExpenseRecord.model_validate(expense)],
        [ExpenseSplitRecord(expense_id=s.expense_id, member_id=s.user_id, amount=s.amount) for s in splits],
    )
    return expense, splits


async def create_expense(db: AsyncSession, data: ExpenseCreate) -> Expense:
    # 1. Payer and every participant must belong to the group
    wanted = {data.paid_by, *data.participant_ids}
    result = await db.execute(
        select(GroupMember.user_id).where(
            GroupMember.group_id == data.group_id,
            GroupMember.user_id.in_(wanted),
        )
    )
    found = set(result.scalars().all())

    if data.paid_by not in found:
        raise InvalidInput("Payer is not a member of the group")
    if wanted - found:
        raise InvalidInput("Some users in split are not group members")

    # 2. Expense and splits go in with one commit
    expense, splits = build_expense(data)
    db.add(expense)
    await db.flush()
    db.add_all(splits)
    await db.commit()
    await db.refresh(expense)

    logger.info(f"Created expense {expense.id} of {expense.amount} split {len(splits)} ways in group {data.group_id}")
    return expense
