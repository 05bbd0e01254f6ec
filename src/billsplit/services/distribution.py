from __future__ import annotations

import math
from typing import Mapping, Optional, Sequence

from billsplit.errors import DistributionError, ErrorCode
from billsplit.logging import get_logger
from billsplit.models import Item, ItemConsumption
from billsplit.services.detailed import QUANTITY_EPSILON

log = get_logger(__name__)


def distribute_item_equally(item: Item, selected_people_ids: Sequence[str]) -> list[ItemConsumption]:
    if not selected_people_ids:
        return []

    quantity_per_person = item.total_quantity / len(selected_people_ids)
    return [
        ItemConsumption(item_id=item.id, person_id=person_id, quantity=quantity_per_person)
        for person_id in selected_people_ids
    ]


def distribute_item_custom(item: Item, quantities: Mapping[str, float]) -> list[ItemConsumption]:
    """Accept manually entered quantities and hand any remainder to the payer.

    Nothing is produced unless the whole item ends up assigned: quantities
    above ``item.total_quantity`` are rejected, and so is a remainder when
    the item has no payer.
    """
    for person_id, quantity in quantities.items():
        if not math.isfinite(quantity) or quantity < 0:
            raise DistributionError(
                ErrorCode.INVALID_QUANTITY,
                "Enter a valid quantity for every person",
                item_id=item.id,
                person_id=person_id,
            )

    consumptions = [
        ItemConsumption(item_id=item.id, person_id=person_id, quantity=quantity)
        for person_id, quantity in quantities.items()
    ]

    distributed = sum(entry.quantity for entry in consumptions)
    if distributed > item.total_quantity + QUANTITY_EPSILON:
        raise DistributionError(
            ErrorCode.EXCEEDS_TOTAL_QUANTITY,
            "The distributed quantity exceeds the total quantity available for this item.",
            item_id=item.id,
            distributed=distributed,
            total_quantity=item.total_quantity,
        )

    remaining = item.total_quantity - distributed
    if remaining <= QUANTITY_EPSILON:
        return consumptions

    if not item.payer_id:
        raise DistributionError(
            ErrorCode.UNASSIGNED_REMAINDER,
            "Distribute the whole quantity of the item or choose a payer to keep the rest.",
            item_id=item.id,
            remaining=remaining,
        )

    for index, entry in enumerate(consumptions):
        if entry.person_id == item.payer_id:
            consumptions[index] = entry.model_copy(update={"quantity": entry.quantity + remaining})
            break
    else:
        consumptions.append(ItemConsumption(item_id=item.id, person_id=item.payer_id, quantity=remaining))

    log.debug("distribution.remainder", item_id=item.id, payer_id=item.payer_id, remaining=remaining)
    return consumptions


def distribute_item(
    item: Item,
    selected_people_ids: Sequence[str],
    quantities: Optional[Mapping[str, Optional[float]]] = None,
) -> list[ItemConsumption]:
    """Distribution as confirmed from a selection of people.

    Only positive quantities for selected people count as manual entries;
    when there are none the item is split equally among the selection.
    """
    if not selected_people_ids:
        raise DistributionError(
            ErrorCode.NO_PEOPLE_SELECTED,
            "Select at least one person to distribute the item.",
            item_id=item.id,
        )

    quantities = quantities or {}
    manual: dict[str, float] = {}
    for person_id in selected_people_ids:
        quantity = quantities.get(person_id)
        if quantity is not None and quantity > 0:
            manual[person_id] = quantity

    if not manual:
        return distribute_item_equally(item, selected_people_ids)
    return distribute_item_custom(item, manual)
