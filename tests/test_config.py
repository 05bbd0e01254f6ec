import logging

import pytest
import structlog

from billsplit.config import get_settings
from billsplit.logging import configure_logging, get_logger
from billsplit.models import ServiceFeeMode, load_detailed_bill
from billsplit.services.bill import new_bill
from billsplit.services.detailed import calculate_detailed_split
from billsplit.services.simple import calculate_simple_split


@pytest.fixture()
def fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_settings_from_environment(monkeypatch, fresh_settings):
    monkeypatch.setenv("DEFAULT_SERVICE_FEE_PERCENTAGE", "12.5")
    monkeypatch.setenv("DEFAULT_SERVICE_FEE_MODE", "equal")
    monkeypatch.setenv("CURRENCY_SYMBOL", "€")

    settings = get_settings()

    assert settings.default_service_fee_percentage == 12.5
    assert settings.default_service_fee_mode == ServiceFeeMode.EQUAL
    assert settings.currency_symbol == "€"

    bill = new_bill()
    assert bill.settings.service_fee_percentage == 12.5
    assert bill.settings.service_fee_mode == ServiceFeeMode.EQUAL


@pytest.fixture()
def restore_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    config = structlog.get_config()
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.configure(**config)


def test_configure_logging_accepts_unknown_level(restore_logging):
    configure_logging("verbose")

    get_logger("billsplit.test").info("logging.configured")


def test_library_logs_nothing_without_configuration(capsys):
    bill = load_detailed_bill(
        {
            "people": [
                {
                    "id": "a",
                    "name": "Ana",
                    "itemConsumptions": [{"itemId": "gone", "quantity": 1}, {"itemId": "x", "quantity": 5}],
                }
            ],
            "items": [{"id": "x", "name": "X", "price": 10, "totalQuantity": 2}],
        }
    )

    calculate_detailed_split(bill)
    calculate_simple_split(100, 4, 10)

    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err == ""
