import uuid
from collections import defaultdict
from decimal import Decimal, ROUND_HALF_UP

from sqlalchemy.ext.asyncio import AsyncSession

from splitledger.services.balance_service import compute_group_balances
from splitledger.services.calculation_service import get_group_snapshot
from splitledger.services.category_service import analyze_spending
from splitledger.utils.currency_utils import from_cents, to_cents


def _percentage(total: Decimal, total_cents: int) -> str:
    """Share of overall spending, one decimal place."""
    if total_cents == 0:
        return "0.0"
    share = Decimal(to_cents(total)) * 100 / Decimal(total_cents)
    return str(share.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


async def get_group_stats(db: AsyncSession, group_id: uuid.UUID) -> dict:
    snapshot = await get_group_snapshot(db, group_id)

    total_cents = sum(to_cents(e.amount) for e in snapshot.expenses)

    # Early return if no expenses
    if not snapshot.expenses:
        return {
            "total_spending": "0.00",
            "expense_count": 0,
            "spending_by_category": [],
            "spending_by_member": [],
        }

    by_category = analyze_spending((e.description, e.amount) for e in snapshot.expenses)

    paid = defaultdict(int)
    owed = defaultdict(int)
    for expense in snapshot.expenses:
        paid[expense.paid_by] += to_cents(expense.amount)
    for split in snapshot.splits:
        owed[split.member_id] += to_cents(split.amount)

    spending_by_member = []
    for member in compute_group_balances(snapshot):
        spending_by_member.append({
            "member_id": str(member.id),
            "name": member.name,
            "owed": str(from_cents(owed[member.id])),
            "paid": str(from_cents(paid[member.id])),
            "balance": str(member.balance),
        })

    # Sort by share of spending (descending)
    spending_by_member.sort(key=lambda x: Decimal(x["owed"]), reverse=True)

    return {
        "total_spending": str(from_cents(total_cents)),
        "expense_count": len(snapshot.expenses),
        "spending_by_category": [
            {
                "category": s.category.id.value,
                "name": s.category.name,
                "total": str(s.total),
                "count": s.count,
                "percentage": _percentage(s.total, total_cents),
            }
            for s in by_category
        ],
        "spending_by_member": spending_by_member,
    }
