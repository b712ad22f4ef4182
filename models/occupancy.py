"""
Occupancy data models for the Reactor Planner.

This module defines the 'Output' of the reporting engine.
Metrics are derived on demand and never persisted.
"""

from pydantic import BaseModel, Field, ConfigDict, model_validator
from datetime import date, datetime


class ReportingPeriod(BaseModel):
    """Half-open reporting window [start, end)."""
    start: datetime
    end: datetime
    label: str = Field(default="")

    @model_validator(mode='after')
    def validate_bounds(self):
        if self.end < self.start:
            raise ValueError("Period end cannot be before period start")
        return self

    @classmethod
    def for_month(cls, year: int, month: int) -> "ReportingPeriod":
        """Calendar month from the 1st 00:00 to the 1st of the next month 00:00."""
        start = datetime(year, month, 1)
        if month == 12:
            end = datetime(year + 1, 1, 1)
        else:
            end = datetime(year, month + 1, 1)
        return cls(start=start, end=end, label=start.strftime("%b %Y"))

    @classmethod
    def containing(cls, day: date) -> "ReportingPeriod":
        return cls.for_month(day.year, day.month)


class OccupancyMetric(BaseModel):
    """Utilization of one reactor over one reporting period."""
    reactor_serial_no: str
    period: str = Field(description="Period label, e.g. 'Mar 2025'")

    available_hours: int = Field(ge=0)
    proposed_hours: int = Field(ge=0)
    actual_hours: int = Field(ge=0, description="Hours of Confirmed bookings")
    downtime_hours: int = Field(ge=0)

    # Not capped at 100: overlapping history can push a reactor over.
    proposed_percent: float = Field(ge=0)
    actual_percent: float = Field(ge=0)

    plant_name: str = Field(default="")
    block_name: str = Field(default="")

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "reactor_serial_no": "R-101",
            "period": "Mar 2025",
            "available_hours": 720,
            "proposed_hours": 72,
            "actual_hours": 36,
            "downtime_hours": 24,
            "proposed_percent": 10.0,
            "actual_percent": 5.0,
            "plant_name": "Plant Alpha",
            "block_name": "Block A"
        }
    })


class BlockSummary(BaseModel):
    """Average utilization of all reactors in one block."""
    block_name: str
    reactor_count: int = Field(ge=0)
    proposed_percent: float = Field(ge=0)
    actual_percent: float = Field(ge=0)


class TrendPoint(BaseModel):
    """Average utilization across a reactor selection for one month."""
    period: str
    proposed_percent: float = Field(ge=0)
    actual_percent: float = Field(ge=0)
