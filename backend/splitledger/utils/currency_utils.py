from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from splitledger.core.errors import InvalidInput, RoundingViolation

CENTS = Decimal("0.01")
# Numeric(12, 2) holds at most 10 integer digits
MAX_AMOUNT = Decimal(10) ** 10


def _as_decimal(value) -> Decimal:
    if isinstance(value, bool):
        raise InvalidInput(f"Not a currency value: {value!r}")
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, float, str)):
        # floats go through their shortest repr so 0.1 stays 0.1
        try:
            amount = Decimal(str(value))
        except InvalidOperation:
            raise InvalidInput(f"Not a currency value: {value!r}") from None
    else:
        raise InvalidInput(f"Not a currency value: {value!r}")
    if not amount.is_finite():
        raise InvalidInput(f"Currency value must be finite, got {value!r}")
    return amount


def round_to_cent(value) -> Decimal:
    """Round half-up to two decimal places; -0.00 is normalised to 0.00."""
    amount = _as_decimal(value)
    if abs(amount) >= MAX_AMOUNT:
        raise InvalidInput(f"Currency value out of range: {value!r}")
    try:
        rounded = amount.quantize(CENTS, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise InvalidInput(f"Currency value cannot be rounded to the cent: {value!r}") from None
    if rounded == 0:
        return Decimal("0.00")
    return rounded


def to_cents(value) -> int:
    return int(round_to_cent(value) * 100)


def from_cents(cents: int) -> Decimal:
    return (Decimal(cents) / Decimal(100)).quantize(CENTS)


def distribute(total, participant_count: int) -> list[Decimal]:
    """
    Split total into participant_count shares that sum EXACTLY to total.
    Works in integer cents to avoid floating point errors.

    Every participant receives the same base share; the first
    `total_cents % participant_count` participants (input order) receive one
    extra cent, so no two shares differ by more than 0.01.

    Args:
        total: Amount to split. Decimal, int, str or float; must be >= 0.
        participant_count: Number of shares. 0 returns an empty list.

    Returns:
        List of Decimal shares, largest first.
    """
    if isinstance(participant_count, bool) or not isinstance(participant_count, int):
        raise InvalidInput(f"Participant count must be an integer, got {participant_count!r}")
    if participant_count < 0:
        raise InvalidInput(f"Participant count cannot be negative, got {participant_count}")

    total_cents = to_cents(total)
    if total_cents < 0:
        raise InvalidInput(f"Cannot split a negative amount: {total}")
    if participant_count == 0:
        return []

    base_cents, extra_count = divmod(total_cents, participant_count)
    cents = [base_cents + (1 if i < extra_count else 0) for i in range(participant_count)]

    if sum(cents) != total_cents:
        raise RoundingViolation(
            f"Distribution of {total_cents} cents over {participant_count} produced {sum(cents)}"
        )
    return [from_cents(c) for c in cents]


def compute_shares(amount, user_ids: list) -> dict:
    """
    Map each user id to its share of amount, extra cents going to the
    earliest ids in the given order.
    """
    if len(set(user_ids)) != len(user_ids):
        raise InvalidInput("Duplicate users found in split")
    return dict(zip(user_ids, distribute(amount, len(user_ids))))
