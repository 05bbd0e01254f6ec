import pytest

from billsplit.errors import ErrorCode, SplitError
from billsplit.models import SimpleBill, load_simple_bill
from billsplit.services.simple import calculate_simple_split, split_simple_bill, split_simple_bill_cents


def test_simple_split_with_service_fee():
    assert calculate_simple_split(100, 4, 10) == 27.5


def test_simple_split_without_service_fee():
    assert calculate_simple_split(90, 3, 0) == pytest.approx(30)


@pytest.mark.parametrize(
    ("total", "people", "fee"),
    [(100, 4, 10), (87.35, 3, 12.5), (1, 7, 0), (2500.4, 11, 15)],
)
def test_simple_split_reconciles_with_total(total, people, fee):
    per_person = calculate_simple_split(total, people, fee)
    assert per_person * people == pytest.approx(total * (1 + fee / 100))


@pytest.mark.parametrize(
    ("total", "people", "fee", "code"),
    [
        (0, 4, 10, ErrorCode.INVALID_AMOUNT),
        (-5, 4, 10, ErrorCode.INVALID_AMOUNT),
        (float("nan"), 4, 10, ErrorCode.INVALID_AMOUNT),
        (100, 0, 10, ErrorCode.INVALID_PEOPLE_COUNT),
        (100, 2.5, 10, ErrorCode.INVALID_PEOPLE_COUNT),
        (100, True, 10, ErrorCode.INVALID_PEOPLE_COUNT),
        (100, 4, -1, ErrorCode.INVALID_SERVICE_FEE),
    ],
)
def test_simple_split_rejects_invalid_input(total, people, fee, code):
    with pytest.raises(SplitError) as exc_info:
        calculate_simple_split(total, people, fee)
    assert exc_info.value.code == code


def test_split_simple_bill_from_payload():
    bill = load_simple_bill({"totalAmount": 100, "numberOfPeople": 4, "serviceFeePercentage": 10, "title": " Bar "})

    assert bill.title == "Bar"
    assert split_simple_bill(bill) == 27.5


def test_split_simple_bill_cents_adds_up():
    bill = SimpleBill(total_amount=100, number_of_people=3, service_fee_percentage=0)

    shares = split_simple_bill_cents(bill)

    assert shares == [3334, 3333, 3333]
    assert sum(shares) == 10000


def test_split_simple_bill_cents_includes_fee():
    bill = SimpleBill(total_amount=100, number_of_people=4, service_fee_percentage=10)

    assert split_simple_bill_cents(bill) == [2750, 2750, 2750, 2750]
