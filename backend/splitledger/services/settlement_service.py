import heapq
import logging
import uuid
from collections import defaultdict
from decimal import Decimal
from typing import Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from splitledger.core.config import ImbalancePolicy, settings
from splitledger.core.errors import DataConsistencyFault, InvalidInput
from splitledger.schemas.ledger import MemberBalance, Settlement
from splitledger.services.balance_service import get_group_balances
from splitledger.utils.currency_utils import from_cents, to_cents

logger = logging.getLogger(__name__)

# Synthetic party absorbing an off-zero ledger under the suspense policy.
SUSPENSE_ID = uuid.UUID(int=0)

# Balances closer to zero than this are settled. Working in whole cents after
# half-up rounding applies it implicitly.
EPSILON = Decimal("0.005")


def minimize(
    members: Iterable[MemberBalance],
    policy: ImbalancePolicy | str | None = None,
    tolerance: Decimal | None = None,
) -> list[Settlement]:
    """
    Turn signed member balances into a short list of transfers that zero them.

    Greedy largest-magnitude matching: the biggest remaining creditor is paid
    by the biggest remaining debtor, min(credit, debt) at a time, until one
    side runs out. Among equal amounts the member listed first wins, so the
    same input always yields the same plan. Every transfer clears at least one
    party, hence at most creditors + debtors - 1 transfers.

    If the balances do not sum to zero within `tolerance`, the `reject` policy
    raises DataConsistencyFault and the `suspense` policy settles the
    difference against a synthetic suspense member (SUSPENSE_ID).
    """
    try:
        policy = ImbalancePolicy(policy or settings.imbalance_policy)
    except ValueError:
        raise InvalidInput(f"Unknown imbalance policy: {policy!r}") from None
    tolerance_cents = to_cents(settings.settlement_tolerance if tolerance is None else tolerance)

    parties = []
    seen = set()
    for member in members:
        member = MemberBalance.model_validate(member)
        if member.id in seen:
            raise InvalidInput(f"Member {member.id} listed twice")
        seen.add(member.id)
        parties.append((member.id, member.name, to_cents(member.balance)))

    imbalance = sum(cents for _, _, cents in parties)
    if abs(imbalance) > tolerance_cents:
        if policy == ImbalancePolicy.reject:
            logger.warning(f"Balances sum to {from_cents(imbalance)} instead of zero")
            raise DataConsistencyFault(
                f"Balances do not sum to zero (off by {from_cents(imbalance)})",
                discrepancy=from_cents(imbalance),
            )
        logger.warning(
            f"Balances sum to {from_cents(imbalance)}; settling the difference against {settings.suspense_name}"
        )
        parties.append((SUSPENSE_ID, settings.suspense_name, -imbalance))

    # heap entries: (-remaining cents, input position, id, name)
    creditors = []
    debtors = []
    for position, (member_id, name, cents) in enumerate(parties):
        if cents > 0:
            creditors.append((-cents, position, member_id, name))
        elif cents < 0:
            debtors.append((cents, position, member_id, name))
    heapq.heapify(creditors)
    heapq.heapify(debtors)

    settlements = []
    while creditors and debtors:
        credit_neg, c_pos, creditor_id, creditor_name = heapq.heappop(creditors)
        debt_neg, d_pos, debtor_id, debtor_name = heapq.heappop(debtors)

        transfer = min(-credit_neg, -debt_neg)
        settlements.append(Settlement(
            from_member_id=debtor_id,
            from_name=debtor_name,
            to_member_id=creditor_id,
            to_name=creditor_name,
            amount=from_cents(transfer),
        ))

        remaining_credit = -credit_neg - transfer
        remaining_debt = -debt_neg - transfer
        if remaining_credit > 0:
            heapq.heappush(creditors, (-remaining_credit, c_pos, creditor_id, creditor_name))
        if remaining_debt > 0:
            heapq.heappush(debtors, (-remaining_debt, d_pos, debtor_id, debtor_name))

    leftover = [name for _, _, _, name in creditors + debtors]
    if leftover:
        logger.debug(f"Rounding residue of {from_cents(imbalance)} left unsettled on {leftover}")

    logger.debug(f"Settled {len(parties)} balances with {len(settlements)} transfers")
    return settlements


def apply_settlements(
    members: Iterable[MemberBalance],
    settlements: Iterable[Settlement],
) -> dict[uuid.UUID, Decimal]:
    """
    Replay transfers against the starting balances. The payer's balance rises
    toward zero and the receiver's falls, so a complete plan leaves every
    member at 0.00.
    """
    cents = defaultdict(int)
    for member in members:
        member = MemberBalance.model_validate(member)
        cents[member.id] += to_cents(member.balance)
    for settlement in settlements:
        amount = to_cents(settlement.amount)
        cents[settlement.from_member_id] += amount
        cents[settlement.to_member_id] -= amount
    return {member_id: from_cents(value) for member_id, value in cents.items()}


async def calculate_settlements(db: AsyncSession, group_id: uuid.UUID) -> dict:
    """Member balances of a group plus the transfers that clear them."""
    balances = await get_group_balances(db, group_id)
    if not balances:
        return {"balances": [], "settlements": []}

    settlements = minimize(balances)
    logger.info(f"Group {group_id}: {len(settlements)} settlements for {len(balances)} members")
    return {"balances": balances, "settlements": settlements}
