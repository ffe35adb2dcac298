"""Schemas for bulk bill ingestion."""

import re
import uuid
from datetime import date
from decimal import Decimal, InvalidOperation

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from billtracker.models.enums import UtilityType

_NON_NUMERIC = re.compile(r"[^0-9.\-]")

_COST_FIELDS = ("total_cost", "demand_cost")
_USAGE_FIELDS = (
    "usage",
    "usage_kwh",
    "usage_therms",
    "usage_mcf",
    "usage_mmbtu",
    "usage_ccf",
)
_NUMERIC_FIELDS = _COST_FIELDS + _USAGE_FIELDS

# Largest magnitudes the bill and usage reading columns can hold.
MAX_COST = Decimal("1e10")
MAX_USAGE = Decimal("1e11")


def coerce_decimal(value: object) -> Decimal | None:
    """Coerce a loosely formatted number ("$1,234.50", 12, "") to Decimal or None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    if isinstance(value, int | float):
        text = str(value)
    else:
        text = _NON_NUMERIC.sub("", str(value))
    if not text:
        return None
    try:
        number = Decimal(text)
    except InvalidOperation:
        return None
    return number if number.is_finite() else None


class InboundItem(BaseModel):
    """One externally parsed bill line item."""

    model_config = ConfigDict(extra="ignore")

    building_id: uuid.UUID | None = Field(
        default=None,
        validation_alias=AliasChoices("buildingId", "manualBuildingId", "building_id"),
    )
    meter_label: str | None = Field(
        default=None,
        validation_alias=AliasChoices("meter_no", "meterNumber", "meter_label"),
    )
    utility_provider: str | None = None

    period_start: date | None = None
    period_end: date | None = None
    total_cost: Decimal | None = None
    demand_cost: Decimal | None = None

    usage: Decimal | None = Field(
        default=None,
        validation_alias=AliasChoices("usage", "usage_total", "usage_value"),
    )
    usage_kwh: Decimal | None = Field(
        default=None, validation_alias=AliasChoices("usage_kwh", "kwh")
    )
    usage_therms: Decimal | None = Field(
        default=None, validation_alias=AliasChoices("usage_therms", "therms")
    )
    usage_mcf: Decimal | None = Field(
        default=None, validation_alias=AliasChoices("usage_mcf", "mcf")
    )
    usage_mmbtu: Decimal | None = Field(
        default=None, validation_alias=AliasChoices("usage_mmbtu", "mmbtu")
    )
    usage_ccf: Decimal | None = Field(
        default=None, validation_alias=AliasChoices("usage_ccf", "ccf")
    )

    @field_validator(*_NUMERIC_FIELDS, mode="before")
    @classmethod
    def coerce_numbers(cls, v: object) -> Decimal | None:
        """Accept currency-formatted strings and blank values."""
        return coerce_decimal(v)

    @field_validator(*_COST_FIELDS)
    @classmethod
    def check_cost_range(cls, v: Decimal | None) -> Decimal | None:
        """Costs must fit the bill cost columns."""
        if v is not None and abs(v) >= MAX_COST:
            raise ValueError("cost is out of range")
        return v

    @field_validator(*_USAGE_FIELDS)
    @classmethod
    def check_usage_range(cls, v: Decimal | None) -> Decimal | None:
        """Quantities must fit the usage reading columns."""
        if v is not None and abs(v) >= MAX_USAGE:
            raise ValueError("quantity is out of range")
        return v

    @field_validator("building_id", "period_start", "period_end", mode="before")
    @classmethod
    def blank_as_missing(cls, v: object) -> object:
        """Treat empty strings as missing values."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("meter_label", "utility_provider", mode="before")
    @classmethod
    def strip_text(cls, v: object) -> str | None:
        """Strip surrounding whitespace; blank becomes None."""
        if v is None:
            return None
        text = str(v).strip()
        return text or None


class IngestRequest(BaseModel):
    """A validated ingestion batch."""

    utility: UtilityType
    bill_upload_id: uuid.UUID | None = None
    items: list[InboundItem]


class IngestItemResult(BaseModel):
    """Outcome of reconciling one item."""

    model_config = ConfigDict(populate_by_name=True)

    index: int
    building_id: uuid.UUID
    meter_id: uuid.UUID
    bill_id: uuid.UUID
    created_bill: bool = Field(alias="createdBill")
    created_usage: bool = Field(alias="createdUsage")


class IngestSummary(BaseModel):
    """Batch-level counters."""

    model_config = ConfigDict(populate_by_name=True)

    items_received: int = Field(alias="itemsReceived")
    bills_created: int = Field(alias="billsCreated")
    usage_rows_upserted: int = Field(alias="usageRowsUpserted")


class IngestResponse(BaseModel):
    """Response body of a successful ingestion."""

    ok: bool = True
    summary: IngestSummary
    results: list[IngestItemResult]
