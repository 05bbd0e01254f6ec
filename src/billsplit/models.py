"""Bill snapshot and result types.

Snapshots arrive from the caller as plain JSON-like data (camelCase field
names, optional fields possibly missing) and are normalized exactly once by
:func:`load_detailed_bill` / :func:`load_simple_bill`. Everything past that
point works with fully populated, immutable models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic.alias_generators import to_camel

from billsplit.errors import ErrorCode, SplitError


class ServiceFeeMode(str, Enum):
    EQUAL = "equal"
    PROPORTIONAL = "proportional"


class SnapshotModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


def _clean_text(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


class ItemConsumption(SnapshotModel):
    item_id: str
    person_id: str
    quantity: float = Field(ge=0)


class Person(SnapshotModel):
    id: str
    name: str
    item_consumptions: list[ItemConsumption] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def fill_consumption_owner(cls, data: Any) -> Any:
        # records stored under a person may omit the person id
        if not isinstance(data, dict):
            return data
        person_id = data.get("id")
        raw = data.get("itemConsumptions", data.get("item_consumptions"))
        if person_id is None or not isinstance(raw, list):
            return data
        filled = []
        for record in raw:
            if isinstance(record, dict) and record.get("personId") is None and record.get("person_id") is None:
                record = {**record, "personId": person_id}
            filled.append(record)
        key = "itemConsumptions" if "itemConsumptions" in data else "item_consumptions"
        return {**data, key: filled}


class Item(SnapshotModel):
    id: str
    name: str
    price: float = Field(0.0, ge=0)
    total_quantity: float = Field(gt=0)
    payer_id: Optional[str] = None

    @field_validator("price", mode="before")
    @classmethod
    def default_missing_price(cls, value: Any) -> Any:
        return 0.0 if value is None else value

    @field_validator("payer_id", mode="before")
    @classmethod
    def clean_payer(cls, value: Any) -> Any:
        return _clean_text(value)

    @property
    def unit_price(self) -> float:
        return self.price / self.total_quantity


class BillSettings(SnapshotModel):
    service_fee_percentage: float = Field(10.0, ge=0)
    service_fee_mode: ServiceFeeMode = ServiceFeeMode.PROPORTIONAL


class DetailedBill(SnapshotModel):
    people: list[Person] = Field(default_factory=list)
    items: list[Item] = Field(default_factory=list)
    settings: BillSettings = Field(default_factory=BillSettings)
    title: Optional[str] = None
    note: Optional[str] = None

    @field_validator("title", "note", mode="before")
    @classmethod
    def strip_text(cls, value: Any) -> Any:
        return _clean_text(value)

    def find_item(self, item_id: str) -> Optional[Item]:
        for item in self.items:
            if item.id == item_id:
                return item
        return None

    def find_person(self, person_id: str) -> Optional[Person]:
        for person in self.people:
            if person.id == person_id:
                return person
        return None


class SimpleBill(SnapshotModel):
    total_amount: float
    number_of_people: int
    service_fee_percentage: float = 0.0
    title: Optional[str] = None
    note: Optional[str] = None

    @field_validator("title", "note", mode="before")
    @classmethod
    def strip_text(cls, value: Any) -> Any:
        return _clean_text(value)


@dataclass(slots=True)
class ItemDetail:
    item_name: str
    quantity: float
    unit_price: float
    subtotal: float

    def as_payload(self) -> dict[str, Any]:
        return {
            "itemName": self.item_name,
            "quantity": self.quantity,
            "unitPrice": self.unit_price,
            "subtotal": self.subtotal,
        }


@dataclass(slots=True)
class BillResult:
    person_id: str
    person_name: str
    items_total: float
    service_fee: float = 0.0
    total_to_pay: float = 0.0
    items_detail: list[ItemDetail] = field(default_factory=list)

    def as_payload(self) -> dict[str, Any]:
        return {
            "personId": self.person_id,
            "personName": self.person_name,
            "itemsTotal": self.items_total,
            "serviceFee": self.service_fee,
            "totalToPay": self.total_to_pay,
            "itemsDetail": [detail.as_payload() for detail in self.items_detail],
        }


def _load(model: type[SnapshotModel], data: Any) -> Any:
    if isinstance(data, model):
        return data
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise SplitError(
            ErrorCode.INVALID_BILL,
            f"Invalid {model.__name__}: {exc.error_count()} error(s)",
            errors=exc.errors(include_url=False),
        ) from exc


def load_detailed_bill(data: Any) -> DetailedBill:
    return _load(DetailedBill, data)


def load_simple_bill(data: Any) -> SimpleBill:
    return _load(SimpleBill, data)
