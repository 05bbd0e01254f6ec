from __future__ import annotations

import math

from billsplit.errors import ErrorCode, SplitError
from billsplit.logging import get_logger
from billsplit.models import SimpleBill
from billsplit.services.rounding import split_amount, to_cents

log = get_logger(__name__)


def _validate(total_amount: float, number_of_people: int, service_fee_percentage: float) -> None:
    if not math.isfinite(total_amount) or total_amount <= 0:
        raise SplitError(ErrorCode.INVALID_AMOUNT, "Total amount must be greater than zero", total_amount=total_amount)
    if isinstance(number_of_people, bool) or not isinstance(number_of_people, int) or number_of_people <= 0:
        raise SplitError(
            ErrorCode.INVALID_PEOPLE_COUNT,
            "Number of people must be a positive integer",
            number_of_people=number_of_people,
        )
    if not math.isfinite(service_fee_percentage) or service_fee_percentage < 0:
        raise SplitError(
            ErrorCode.INVALID_SERVICE_FEE,
            "Service fee percentage must not be negative",
            service_fee_percentage=service_fee_percentage,
        )


def calculate_simple_split(total_amount: float, number_of_people: int, service_fee_percentage: float) -> float:
    """Amount each person pays when the total plus service fee is split equally.

    No rounding is applied; use :func:`split_simple_bill_cents` for amounts
    that must add up to the cent.
    """
    _validate(total_amount, number_of_people, service_fee_percentage)

    service_fee = total_amount * (service_fee_percentage / 100)
    total_with_fee = total_amount + service_fee
    return total_with_fee / number_of_people


def split_simple_bill(bill: SimpleBill) -> float:
    amount = calculate_simple_split(bill.total_amount, bill.number_of_people, bill.service_fee_percentage)
    log.debug("split.simple", people=bill.number_of_people, per_person=amount)
    return amount


def split_simple_bill_cents(bill: SimpleBill) -> list[int]:
    _validate(bill.total_amount, bill.number_of_people, bill.service_fee_percentage)
    total_cents = to_cents(bill.total_amount * (1 + bill.service_fee_percentage / 100))
    shares = split_amount(total_cents, list(range(bill.number_of_people)))
    return [shares[index] for index in range(bill.number_of_people)]
