"""
Reactor and Maintenance data models for the Reactor Planner.

This module defines the 'Supply' side of the planner:
1. Reactors (the physical, indivisible units being scheduled)
2. Maintenance Windows (blocking periods when a reactor is unavailable)
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict, field_validator
from datetime import date, datetime

from .timestamps import to_local_naive


class DowntimeType(str, Enum):
    """Categories of blocking maintenance work."""
    MAINTENANCE = "Maintenance"
    CLEANING = "Cleaning"
    CALIBRATION = "Calibration"
    BREAKDOWN = "Breakdown"


class DowntimeStatus(str, Enum):
    """Display status of a maintenance window relative to 'now'."""
    SCHEDULED = "Scheduled"
    CANCELLED = "Cancelled"
    COMPLETED = "Completed"


class Reactor(BaseModel):
    """
    A schedulable reactor vessel.
    Only `serial_no` matters to scheduling; everything else is descriptive.
    """
    serial_no: str = Field(min_length=1, description="Unique serial key, e.g. 'R-101'")
    max_capacity_liters: int = Field(gt=0, description="Working volume")
    capacity_range: str = Field(default="", description="Capacity bucket, e.g. '500-1000L'")
    moc: str = Field(default="", description="Material of construction (SS316, Glass Lined...)")
    agitator_type: str = Field(default="")

    # Used by the block-level reporting roll-up
    plant_name: str = Field(min_length=1, description="Plant the reactor belongs to")
    block_name: str = Field(min_length=1, description="Block within the plant")

    commission_date: Optional[date] = Field(default=None)
    notes: Optional[str] = Field(default=None)

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "serial_no": "R-101",
            "max_capacity_liters": 1000,
            "capacity_range": "500-1000L",
            "moc": "SS316",
            "agitator_type": "Anchor",
            "plant_name": "Plant Alpha",
            "block_name": "Block A",
            "commission_date": "2022-01-15"
        }
    })


class MaintenanceRequest(BaseModel):
    """Candidate maintenance window submitted for scheduling."""
    reactor_serial_no: str = Field(min_length=1)
    start_datetime: datetime
    end_datetime: datetime
    type: DowntimeType = Field(default=DowntimeType.MAINTENANCE)
    reason: str = Field(default="", description="Free-text justification")
    updated_by_email: str = Field(default="")

    @field_validator('start_datetime', 'end_datetime')
    @classmethod
    def normalize_timezone(cls, v):
        return to_local_naive(v)

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "reactor_serial_no": "R-102",
            "start_datetime": "2025-03-10T06:00:00",
            "end_datetime": "2025-03-10T18:00:00",
            "type": "Calibration",
            "reason": "Annual calibration of sensors",
            "updated_by_email": "maint@facility.com"
        }
    })


class MaintenanceWindow(MaintenanceRequest):
    """
    A committed downtime on a reactor.
    Cancellation is a soft delete: the record stays for history but no longer
    blocks bookings or reduces available hours.
    """
    id: str = Field(description="Unique identifier")
    updated_at: datetime
    is_cancelled: bool = Field(default=False)

    def has_elapsed(self, now: datetime) -> bool:
        """Once the end time has passed the window is immutable."""
        return self.end_datetime <= now

    def status(self, now: datetime) -> DowntimeStatus:
        if self.is_cancelled:
            return DowntimeStatus.CANCELLED
        if self.has_elapsed(now):
            return DowntimeStatus.COMPLETED
        return DowntimeStatus.SCHEDULED
