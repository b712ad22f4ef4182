"""
Data models package for the Reactor Planner.

This package exports the three core pillars of the data architecture:
1. Demand (Booking, BookingRequest, BookingStatus, Team)
2. Supply (Reactor, MaintenanceWindow, DowntimeType)
3. Output (ReportingPeriod, OccupancyMetric and its roll-ups)
"""

from .booking import (
    Booking,
    BookingRequest,
    BookingStatus,
    Team
)

from .resource import (
    Reactor,
    DowntimeType,
    DowntimeStatus,
    MaintenanceRequest,
    MaintenanceWindow
)

from .timestamps import to_local_naive

from .occupancy import (
    ReportingPeriod,
    OccupancyMetric,
    BlockSummary,
    TrendPoint
)

__all__ = [
    # --- Demand Models ---
    "Booking",
    "BookingRequest",
    "BookingStatus",
    "Team",

    # --- Resource & Constraint Models ---
    "Reactor",
    "DowntimeType",
    "DowntimeStatus",
    "MaintenanceRequest",
    "MaintenanceWindow",

    # --- Output Models ---
    "ReportingPeriod",
    "OccupancyMetric",
    "BlockSummary",
    "TrendPoint",

    # --- Helpers ---
    "to_local_naive",
]
