"""
Booking data models for the Reactor Planner.
"""

from enum import Enum
from pydantic import BaseModel, Field, field_validator, ConfigDict
from datetime import datetime

from .timestamps import to_local_naive


class Team(str, Enum):
    """Teams that request reactor time."""
    CDS = "CDS"
    MFG = "Mfg"
    TECH_TRANSFER = "Tech Transfer"


class BookingStatus(str, Enum):
    """
    Lifecycle state of a booking.
    PROPOSED is a forecast, CONFIRMED is the realized (audited) work log.
    """
    PROPOSED = "Proposed"
    CONFIRMED = "Confirmed"
    CANCELLED = "Cancelled"


class BookingBase(BaseModel):
    """
    Fields shared by submitted and stored bookings.
    Interval ordering is NOT validated here: the conflict resolver reports it
    as a typed violation so every entry point answers the same way.
    """

    # --- Target ---
    reactor_serial_no: str = Field(min_length=1, description="Reactor being claimed")

    # --- Batch Details ---
    team: Team = Field(description="Requesting team")
    product_name: str = Field(min_length=1)
    stage: str = Field(default="", description="e.g. 'Intermediate', 'Final'")
    batch_number: str = Field(default="")
    operation: str = Field(default="", description="e.g. 'Reflux', 'Crystallization'")

    # --- Timing ---
    start_datetime: datetime
    end_datetime: datetime

    status: BookingStatus = Field(default=BookingStatus.PROPOSED)
    requested_by_email: str = Field(default="")

    @field_validator('status', mode='before')
    @classmethod
    def normalize_status(cls, v):
        """Accept the legacy 'Actual' label for confirmed work logs."""
        if isinstance(v, str) and v.strip().title() == "Actual":
            return BookingStatus.CONFIRMED
        return v

    @field_validator('start_datetime', 'end_datetime')
    @classmethod
    def normalize_timezone(cls, v):
        return to_local_naive(v)

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "reactor_serial_no": "R-101",
            "team": "CDS",
            "product_name": "Paracetamol",
            "stage": "Intermediate",
            "batch_number": "BT-001",
            "operation": "Reflux",
            "start_datetime": "2025-03-01T08:00:00",
            "end_datetime": "2025-03-01T20:00:00",
            "status": "Proposed",
            "requested_by_email": "john.doe@facility.com"
        }
    })


class BookingRequest(BookingBase):
    """A candidate booking as submitted by a planner."""

    @field_validator('status')
    @classmethod
    def reject_cancelled_submission(cls, v):
        if v == BookingStatus.CANCELLED:
            raise ValueError("New bookings must be 'Proposed' or 'Confirmed'")
        return v


class Booking(BookingBase):
    """
    A stored booking. There is no update path: Proposed bookings can only be
    deleted, Confirmed ones are permanent.
    """
    id: str = Field(description="Unique identifier")
    created_at: datetime
    updated_at: datetime

    @property
    def is_confirmed(self) -> bool:
        return self.status == BookingStatus.CONFIRMED
