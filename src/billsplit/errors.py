from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    INVALID_BILL = "invalid_bill"
    INVALID_AMOUNT = "invalid_amount"
    INVALID_PEOPLE_COUNT = "invalid_people_count"
    INVALID_SERVICE_FEE = "invalid_service_fee"
    INVALID_SERVICE_FEE_MODE = "invalid_service_fee_mode"
    INVALID_SETTINGS = "invalid_settings"
    INVALID_NAME = "invalid_name"
    INVALID_QUANTITY = "invalid_quantity"
    INVALID_PRICE = "invalid_price"
    UNKNOWN_ITEM = "unknown_item"
    UNKNOWN_PERSON = "unknown_person"
    NO_PEOPLE_SELECTED = "no_people_selected"
    EXCEEDS_TOTAL_QUANTITY = "exceeds_total_quantity"
    UNASSIGNED_REMAINDER = "unassigned_remainder"
    OVER_ALLOCATED = "over_allocated"


class SplitError(ValueError):
    """Validation failure with a machine-readable reason code.

    ``str(error)`` is the human-readable message; ``context`` holds the ids
    and quantities involved so callers can build their own wording.
    """

    def __init__(self, code: ErrorCode, message: str, **context: Any) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.context = context

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code.value!r}, message={self.message!r})"


class DistributionError(SplitError):
    pass


class BillEditError(SplitError):
    pass
