"""Bill, meter and upload schemas for responses and manual entry."""

import uuid
from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, model_validator

from billtracker.models.enums import UploadStatus, UtilityType


class MeterResponse(BaseModel):
    """Schema for meter response."""

    id: uuid.UUID
    building_id: uuid.UUID
    label: str
    utility: UtilityType
    provider: str | None
    created_at: datetime

    model_config = {"from_attributes": True}


class UsageReadingResponse(BaseModel):
    """Schema for a bill's usage reading."""

    usage_kwh: Decimal | None
    usage_therms: Decimal | None
    usage_mcf: Decimal | None
    usage_mmbtu: Decimal | None

    model_config = {"from_attributes": True}


class BillResponse(BaseModel):
    """Schema for bill response, including its usage reading."""

    id: uuid.UUID
    meter_id: uuid.UUID
    building_id: uuid.UUID
    bill_upload_id: uuid.UUID | None
    period_start: date
    period_end: date
    total_cost: Decimal | None
    demand_cost: Decimal | None
    usage: UsageReadingResponse | None

    model_config = {"from_attributes": True}


class BillUploadResponse(BaseModel):
    """Schema for bill upload response."""

    id: uuid.UUID
    building_id: uuid.UUID
    meter_id: uuid.UUID | None
    file_name: str
    status: UploadStatus
    created_at: datetime
    entered_at: datetime | None

    model_config = {"from_attributes": True}


class ManualBillEntry(BaseModel):
    """Bill details typed in by hand for a pending upload."""

    period_start: date
    period_end: date
    meter_label: str | None = None
    utility: UtilityType | None = None
    utility_provider: str | None = None
    usage_kwh: Decimal | None = None
    usage_therms: Decimal | None = None
    usage_mcf: Decimal | None = None
    usage_mmbtu: Decimal | None = None
    total_cost: Decimal | None = None
    demand_cost: Decimal | None = None

    @model_validator(mode="after")
    def check_demand_within_total(self) -> "ManualBillEntry":
        """Demand portion is part of the total, so it cannot exceed it."""
        if (
            self.total_cost is not None
            and self.demand_cost is not None
            and self.demand_cost > self.total_cost
        ):
            raise ValueError("Demand portion cannot exceed total cost")
        if self.period_end < self.period_start:
            raise ValueError("Billing period end cannot be before its start")
        return self


class NewBillEntry(BaseModel):
    """A bill typed in by hand for a building meter, without an upload.

    Every field is optional here so the service can report what is missing
    in form order.
    """

    building_id: uuid.UUID | None = None
    utility: UtilityType | None = None
    meter_id: uuid.UUID | None = None
    period_start: date | None = None
    period_end: date | None = None
    usage_kwh: Decimal | None = None
    usage_therms: Decimal | None = None
    usage_mcf: Decimal | None = None
    usage_mmbtu: Decimal | None = None
    total_cost: Decimal | None = None
    demand_cost: Decimal | None = None

    @model_validator(mode="after")
    def check_costs_and_period(self) -> "NewBillEntry":
        """Same cross-field rules as upload entry, applied when both sides are present."""
        if (
            self.total_cost is not None
            and self.demand_cost is not None
            and self.demand_cost > self.total_cost
        ):
            raise ValueError("Demand portion cannot exceed total cost")
        if self.period_start and self.period_end and self.period_end < self.period_start:
            raise ValueError("Billing period end cannot be before its start")
        return self
