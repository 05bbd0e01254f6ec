import pytest

from billsplit.errors import DistributionError, ErrorCode
from billsplit.models import Item
from billsplit.services.distribution import distribute_item, distribute_item_custom, distribute_item_equally


def beer(payer_id=None):
    return Item(id="beer", name="Beer", price=30, total_quantity=10, payer_id=payer_id)


def as_quantities(consumptions):
    return {c.person_id: c.quantity for c in consumptions}


def test_distribute_equally():
    consumptions = distribute_item_equally(beer(), ["ana", "bia"])

    assert [(c.item_id, c.person_id, c.quantity) for c in consumptions] == [
        ("beer", "ana", 5),
        ("beer", "bia", 5),
    ]


def test_distribute_equally_fractional_shares():
    consumptions = distribute_item_equally(beer(), ["ana", "bia", "caio"])

    assert sum(c.quantity for c in consumptions) == pytest.approx(10)
    assert consumptions[0].quantity == pytest.approx(10 / 3)


def test_distribute_equally_without_people():
    assert distribute_item_equally(beer(), []) == []


def test_custom_remainder_goes_to_new_payer_entry():
    consumptions = distribute_item_custom(beer(payer_id="ana"), {"bia": 3})

    assert as_quantities(consumptions) == {"bia": 3, "ana": 7}


def test_custom_remainder_added_to_payer_entry():
    consumptions = distribute_item_custom(beer(payer_id="ana"), {"ana": 2, "bia": 3})

    assert as_quantities(consumptions) == {"ana": 7, "bia": 3}
    assert len(consumptions) == 2


def test_custom_full_distribution_needs_no_payer():
    consumptions = distribute_item_custom(beer(), {"ana": 4, "bia": 6})

    assert as_quantities(consumptions) == {"ana": 4, "bia": 6}


def test_custom_exceeding_total_is_rejected():
    with pytest.raises(DistributionError) as exc_info:
        distribute_item_custom(beer(payer_id="ana"), {"ana": 8, "bia": 3})
    assert exc_info.value.code == ErrorCode.EXCEEDS_TOTAL_QUANTITY


def test_custom_remainder_without_payer_is_rejected():
    with pytest.raises(DistributionError) as exc_info:
        distribute_item_custom(beer(), {"ana": 4})
    assert exc_info.value.code == ErrorCode.UNASSIGNED_REMAINDER
    assert exc_info.value.context["remaining"] == 6


def test_custom_negative_quantity_is_rejected():
    with pytest.raises(DistributionError) as exc_info:
        distribute_item_custom(beer(payer_id="ana"), {"bia": -1})
    assert exc_info.value.code == ErrorCode.INVALID_QUANTITY


def test_distribute_item_requires_selection():
    with pytest.raises(DistributionError) as exc_info:
        distribute_item(beer(), [])
    assert exc_info.value.code == ErrorCode.NO_PEOPLE_SELECTED


def test_distribute_item_without_quantities_splits_equally():
    consumptions = distribute_item(beer(), ["ana", "bia"], {"ana": 0, "bia": None})

    assert as_quantities(consumptions) == {"ana": 5, "bia": 5}


def test_distribute_item_ignores_unselected_quantities():
    consumptions = distribute_item(beer(payer_id="ana"), ["bia"], {"bia": 2, "caio": 5})

    assert as_quantities(consumptions) == {"bia": 2, "ana": 8}
