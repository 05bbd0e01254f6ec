from __future__ import annotations

from decimal import Decimal, ROUND_FLOOR, ROUND_HALF_EVEN
from typing import Hashable, Mapping, Sequence, TypeVar

from billsplit.models import BillResult

K = TypeVar("K", bound=Hashable)


def to_cents(value: float) -> int:
    return int((Decimal(str(value)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_EVEN))


def split_amount(amount_cents: int, consumers: Sequence[K]) -> dict[K, int]:
    if amount_cents < 0:
        raise ValueError("amount_cents must be non-negative")
    if not consumers:
        raise ValueError("consumers must not be empty")

    n = len(consumers)
    decimal_amount = Decimal(amount_cents)
    base_share = (decimal_amount / Decimal(n)).quantize(Decimal("1"), rounding=ROUND_HALF_EVEN)

    shares = [int(base_share) for _ in consumers]
    remainder = amount_cents - sum(shares)

    idx = 0
    step = 1 if remainder > 0 else -1
    while remainder != 0:
        shares[idx] += step
        remainder -= step
        idx = (idx + 1) % n

    return {consumer: share for consumer, share in zip(consumers, shares)}


def allocate_cents(amounts: Mapping[K, float]) -> dict[K, int]:
    """Round every amount to cents so that the parts add up to the rounded whole.

    Each amount is truncated to whole cents, then the missing cents go to the
    amounts with the largest fractional remainder (ties in input order).
    """
    if not amounts:
        return {}

    target = to_cents(sum(amounts.values()))
    exact = {key: Decimal(str(value)) * 100 for key, value in amounts.items()}
    floored = {key: int(value.to_integral_value(rounding=ROUND_FLOOR)) for key, value in exact.items()}

    remainder = target - sum(floored.values())
    order = sorted(exact, key=lambda key: exact[key] - floored[key], reverse=True)
    if remainder < 0:
        order.reverse()

    step = 1 if remainder > 0 else -1
    idx = 0
    while remainder != 0:
        floored[order[idx]] += step
        remainder -= step
        idx = (idx + 1) % len(order)

    return floored


def round_results(results: Sequence[BillResult]) -> dict[str, int]:
    return allocate_cents({result.person_id: result.total_to_pay for result in results})
