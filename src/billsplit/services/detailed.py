from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Mapping, Sequence

from billsplit.errors import ErrorCode, SplitError
from billsplit.logging import get_logger
from billsplit.models import BillResult, BillSettings, DetailedBill, Item, ItemConsumption, ItemDetail, Person, ServiceFeeMode

QUANTITY_EPSILON = 1e-9

log = get_logger(__name__)


@dataclass(slots=True)
class OverAllocation:
    item_id: str
    item_name: str
    total_quantity: float
    consumed_quantity: float


def resolve_consumptions(
    person: Person, items_by_id: Mapping[str, Item]
) -> Iterator[tuple[ItemConsumption, Item]]:
    """Pair each consumption record with its item.

    Records whose item was removed from the bill are skipped: the bill may
    carry dangling references between an item deletion and the next save,
    and they must not fail the whole computation.
    """
    for consumption in person.item_consumptions:
        item = items_by_id.get(consumption.item_id)
        if item is None:
            log.debug("consumption.skipped", person_id=person.id, item_id=consumption.item_id)
            continue
        yield consumption, item


def calculate_person_items(person: Person, items_by_id: Mapping[str, Item]) -> list[ItemDetail]:
    details: list[ItemDetail] = []
    for consumption, item in resolve_consumptions(person, items_by_id):
        unit_price = item.unit_price
        details.append(
            ItemDetail(
                item_name=item.name,
                quantity=consumption.quantity,
                unit_price=unit_price,
                subtotal=unit_price * consumption.quantity,
            )
        )
    return details


def total_service_fee(results: Sequence[BillResult], settings: BillSettings) -> float:
    total_bill_amount = sum(result.items_total for result in results)
    return total_bill_amount * (settings.service_fee_percentage / 100)


def _allocate_service_fee(results: list[BillResult], settings: BillSettings) -> None:
    if not results:
        return

    total_bill_amount = sum(result.items_total for result in results)
    fee_total = total_service_fee(results, settings)

    for result in results:
        if settings.service_fee_mode == ServiceFeeMode.EQUAL:
            result.service_fee = fee_total / len(results)
        elif total_bill_amount == 0:
            result.service_fee = 0.0
        else:
            result.service_fee = fee_total * (result.items_total / total_bill_amount)
        result.total_to_pay = result.items_total + result.service_fee


def calculate_detailed_split(bill: DetailedBill, *, strict: bool = False) -> list[BillResult]:
    """Per-person breakdown of an itemized bill, in the order of ``bill.people``.

    Consumption records are priced at ``item.price / item.total_quantity``
    per unit, then the service fee is spread either equally or in proportion
    to what each person consumed. With ``strict`` the bill is rejected when
    any item is consumed beyond its total quantity; otherwise that is only
    logged.
    """
    over_allocated = find_over_allocated_items(bill)
    if over_allocated:
        if strict:
            _raise_over_allocated(over_allocated)
        log.warning("split.over_allocated", item_ids=[entry.item_id for entry in over_allocated])

    items_by_id = {item.id: item for item in bill.items}

    results: list[BillResult] = []
    for person in bill.people:
        details = calculate_person_items(person, items_by_id)
        results.append(
            BillResult(
                person_id=person.id,
                person_name=person.name,
                items_total=sum(detail.subtotal for detail in details),
                items_detail=details,
            )
        )

    _allocate_service_fee(results, bill.settings)

    log.debug(
        "split.detailed",
        people=len(results),
        items=len(bill.items),
        fee_mode=bill.settings.service_fee_mode.value,
    )
    return results


def consumed_quantity(bill: DetailedBill, item_id: str) -> float:
    return sum(
        consumption.quantity
        for person in bill.people
        for consumption in person.item_consumptions
        if consumption.item_id == item_id
    )


def remaining_quantity(bill: DetailedBill, item_id: str) -> float:
    item = bill.find_item(item_id)
    if item is None:
        raise SplitError(ErrorCode.UNKNOWN_ITEM, "Item not found", item_id=item_id)
    return max(item.total_quantity - consumed_quantity(bill, item_id), 0.0)


def find_over_allocated_items(bill: DetailedBill) -> list[OverAllocation]:
    found: list[OverAllocation] = []
    for item in bill.items:
        consumed = consumed_quantity(bill, item.id)
        if consumed > item.total_quantity + QUANTITY_EPSILON:
            found.append(
                OverAllocation(
                    item_id=item.id,
                    item_name=item.name,
                    total_quantity=item.total_quantity,
                    consumed_quantity=consumed,
                )
            )
    return found


def _raise_over_allocated(found: Sequence[OverAllocation]) -> None:
    names = ", ".join(entry.item_name for entry in found)
    raise SplitError(
        ErrorCode.OVER_ALLOCATED,
        f"Consumed quantity exceeds the total quantity for: {names}",
        items=[entry.item_id for entry in found],
    )


def validate_detailed_bill(bill: DetailedBill) -> None:
    found = find_over_allocated_items(bill)
    if found:
        _raise_over_allocated(found)
