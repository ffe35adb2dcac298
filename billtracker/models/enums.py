"""Enum definitions for meters and uploads."""

from enum import Enum


class UtilityType(str, Enum):
    """Kind of utility a meter measures."""

    ELECTRIC = "electric"
    GAS = "gas"


class UploadStatus(str, Enum):
    """Lifecycle of a bill upload awaiting manual entry."""

    PENDING = "pending"
    ENTERED = "entered"
