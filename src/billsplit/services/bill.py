"""Editing operations over a detailed bill snapshot.

Each function takes a :class:`DetailedBill` and returns a new one; the input
is never modified. Callers own the snapshot and decide when to persist it.
"""

from __future__ import annotations

import math
import uuid
from typing import Any, Mapping, Optional, Sequence

from pydantic import ValidationError
from pydantic.alias_generators import to_camel

from billsplit.config import get_settings
from billsplit.errors import BillEditError, ErrorCode
from billsplit.logging import get_logger
from billsplit.models import BillSettings, DetailedBill, Item, ItemConsumption, Person
from billsplit.services.detailed import QUANTITY_EPSILON, consumed_quantity
from billsplit.services.distribution import distribute_item

PRICE_MODES = ("total", "unit")

log = get_logger(__name__)


def _new_id() -> str:
    return uuid.uuid4().hex


def _require_item(bill: DetailedBill, item_id: str) -> Item:
    item = bill.find_item(item_id)
    if item is None:
        raise BillEditError(ErrorCode.UNKNOWN_ITEM, "Item not found", item_id=item_id)
    return item


def _require_person(bill: DetailedBill, person_id: str) -> Person:
    person = bill.find_person(person_id)
    if person is None:
        raise BillEditError(ErrorCode.UNKNOWN_PERSON, "Person not found", person_id=person_id)
    return person


def new_bill(
    settings: Optional[BillSettings] = None,
    title: Optional[str] = None,
    note: Optional[str] = None,
) -> DetailedBill:
    if settings is None:
        config = get_settings()
        settings = BillSettings(
            service_fee_percentage=config.default_service_fee_percentage,
            service_fee_mode=config.default_service_fee_mode,
        )
    return DetailedBill(settings=settings, title=title, note=note)


def add_person(bill: DetailedBill, name: str, person_id: Optional[str] = None) -> DetailedBill:
    name = name.strip()
    if not name:
        raise BillEditError(ErrorCode.INVALID_NAME, "Enter the person's name")

    person = Person(id=person_id or _new_id(), name=name)
    if bill.find_person(person.id) is not None:
        raise BillEditError(ErrorCode.INVALID_NAME, "Person id already in use", person_id=person.id)

    log.debug("bill.person.added", person_id=person.id)
    return bill.model_copy(update={"people": [*bill.people, person]})


def remove_person(bill: DetailedBill, person_id: str) -> DetailedBill:
    _require_person(bill, person_id)
    people = [person for person in bill.people if person.id != person_id]
    items = [
        item.model_copy(update={"payer_id": None}) if item.payer_id == person_id else item
        for item in bill.items
    ]
    log.debug("bill.person.removed", person_id=person_id)
    return bill.model_copy(update={"people": people, "items": items})


def add_item(
    bill: DetailedBill,
    name: str,
    price: float,
    quantity: float,
    payer_id: Optional[str] = None,
    price_mode: str = "total",
    item_id: Optional[str] = None,
) -> DetailedBill:
    """Add an item; with ``price_mode="unit"`` the price is per unit and gets
    multiplied by the quantity, since items always store the total price."""
    name = name.strip()
    if not name:
        raise BillEditError(ErrorCode.INVALID_NAME, "Enter the item name")
    if not math.isfinite(price) or price < 0:
        raise BillEditError(ErrorCode.INVALID_PRICE, "Enter a valid price", price=price)
    if not math.isfinite(quantity) or quantity <= 0:
        raise BillEditError(ErrorCode.INVALID_QUANTITY, "Enter a valid quantity", quantity=quantity)
    if price_mode not in PRICE_MODES:
        raise ValueError(f"price_mode must be one of {PRICE_MODES}")
    if payer_id is not None:
        _require_person(bill, payer_id)

    total_price = price * quantity if price_mode == "unit" else price
    item = Item(
        id=item_id or _new_id(),
        name=name,
        price=total_price,
        total_quantity=quantity,
        payer_id=payer_id,
    )
    log.debug("bill.item.added", item_id=item.id, price=total_price, quantity=quantity)
    return bill.model_copy(update={"items": [*bill.items, item]})


def _without_item_records(person: Person, item_id: str) -> Person:
    kept = [record for record in person.item_consumptions if record.item_id != item_id]
    if len(kept) == len(person.item_consumptions):
        return person
    return person.model_copy(update={"item_consumptions": kept})


def remove_item(bill: DetailedBill, item_id: str) -> DetailedBill:
    _require_item(bill, item_id)
    items = [item for item in bill.items if item.id != item_id]
    people = [_without_item_records(person, item_id) for person in bill.people]
    log.debug("bill.item.removed", item_id=item_id)
    return bill.model_copy(update={"items": items, "people": people})


def add_item_consumption(bill: DetailedBill, item_id: str, person_id: str, quantity: float) -> DetailedBill:
    item = _require_item(bill, item_id)
    person = _require_person(bill, person_id)
    if not math.isfinite(quantity) or quantity <= 0:
        raise BillEditError(ErrorCode.INVALID_QUANTITY, "Enter a valid quantity", quantity=quantity)

    if consumed_quantity(bill, item_id) + quantity > item.total_quantity + QUANTITY_EPSILON:
        raise BillEditError(
            ErrorCode.OVER_ALLOCATED,
            "The quantity exceeds what is left of this item.",
            item_id=item_id,
            person_id=person_id,
        )

    records = list(person.item_consumptions)
    for index, record in enumerate(records):
        if record.item_id == item_id:
            records[index] = record.model_copy(update={"quantity": record.quantity + quantity})
            break
    else:
        records.append(ItemConsumption(item_id=item_id, person_id=person_id, quantity=quantity))

    updated = person.model_copy(update={"item_consumptions": records})
    people = [updated if p.id == person_id else p for p in bill.people]
    return bill.model_copy(update={"people": people})


def apply_distribution(bill: DetailedBill, item_id: str, consumptions: Sequence[ItemConsumption]) -> DetailedBill:
    """Replace every consumption record of an item with ``consumptions``.

    All records are checked before any is applied, so a rejected
    distribution leaves the bill as it was.
    """
    item = _require_item(bill, item_id)
    by_person: dict[str, float] = {}
    for consumption in consumptions:
        if consumption.item_id != item_id:
            raise BillEditError(
                ErrorCode.UNKNOWN_ITEM,
                "Consumption belongs to another item",
                item_id=consumption.item_id,
            )
        _require_person(bill, consumption.person_id)
        by_person[consumption.person_id] = by_person.get(consumption.person_id, 0.0) + consumption.quantity

    if sum(by_person.values()) > item.total_quantity + QUANTITY_EPSILON:
        raise BillEditError(
            ErrorCode.OVER_ALLOCATED,
            "The distributed quantity exceeds the total quantity available for this item.",
            item_id=item_id,
        )

    people = []
    for person in bill.people:
        person = _without_item_records(person, item_id)
        if person.id in by_person:
            record = ItemConsumption(item_id=item_id, person_id=person.id, quantity=by_person[person.id])
            person = person.model_copy(update={"item_consumptions": [*person.item_consumptions, record]})
        people.append(person)

    log.debug("bill.item.distributed", item_id=item_id, people=len(by_person))
    return bill.model_copy(update={"people": people})


def distribute(
    bill: DetailedBill,
    item_id: str,
    selected_people_ids: Sequence[str],
    quantities: Optional[Mapping[str, Optional[float]]] = None,
) -> DetailedBill:
    item = _require_item(bill, item_id)
    for person_id in selected_people_ids:
        _require_person(bill, person_id)
    return apply_distribution(bill, item_id, distribute_item(item, selected_people_ids, quantities))


_SETTINGS_ERROR_CODES = {
    "service_fee_percentage": ErrorCode.INVALID_SERVICE_FEE,
    "service_fee_mode": ErrorCode.INVALID_SERVICE_FEE_MODE,
}


def update_settings(bill: DetailedBill, **changes: Any) -> DetailedBill:
    """Change settings by field name (``service_fee_mode``) or payload name
    (``serviceFeeMode``); unknown names are rejected."""
    names = {to_camel(name): name for name in BillSettings.model_fields}
    names.update({name: name for name in BillSettings.model_fields})

    unknown = sorted(key for key in changes if key not in names)
    if unknown:
        raise BillEditError(ErrorCode.INVALID_SETTINGS, f"Unknown settings: {', '.join(unknown)}", keys=unknown)

    values = bill.settings.model_dump()
    values.update({names[key]: value for key, value in changes.items()})
    try:
        settings = BillSettings.model_validate(values)
    except ValidationError as exc:
        field = str(exc.errors()[0]["loc"][0])
        code = _SETTINGS_ERROR_CODES.get(names.get(field, field), ErrorCode.INVALID_SETTINGS)
        raise BillEditError(code, "Invalid service fee settings", changes=changes) from exc
    return bill.model_copy(update={"settings": settings})


def set_details(bill: DetailedBill, title: Optional[str] = None, note: Optional[str] = None) -> DetailedBill:
    return DetailedBill.model_validate({**bill.model_dump(), "title": title, "note": note})
