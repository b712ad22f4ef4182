"""
Demo data generator for the Reactor Planner.
Builds a small two-plant fleet with a handful of bookings and maintenance
windows placed relative to an anchor time, so reports always have something
current to show.
"""

import logging
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional

from models import (
    Booking,
    BookingStatus,
    DowntimeType,
    MaintenanceWindow,
    Reactor,
    Team
)

logger = logging.getLogger(__name__)

# serial, liters, range, moc, agitator, plant, block, commissioned
FLEET = [
    ("R-101", 1000, "500-1000L", "SS316", "Anchor", "Plant Alpha", "Block A", date(2022, 1, 15)),
    ("R-102", 500, "0-500L", "Glass Lined", "Propeller", "Plant Alpha", "Block A", date(2022, 3, 10)),
    ("R-103", 2000, "1000L+", "SS316L", "Turbine", "Plant Alpha", "Block B", date(2021, 11, 20)),
    ("R-104", 1500, "1000L+", "Hastelloy", "Magnetic", "Plant Alpha", "Block B", date(2023, 5, 5)),
    ("R-201", 1000, "500-1000L", "SS316", "Anchor", "Plant Beta", "Block C", date(2022, 1, 15)),
    ("R-202", 2500, "1000L+", "Glass Lined", "Rushton", "Plant Beta", "Block C", date(2020, 8, 12)),
]


class DemoDataFactory:
    def __init__(self, anchor: Optional[datetime] = None):
        # Whole hours keep the demo numbers readable
        anchor = anchor or datetime.now()
        self.anchor = anchor.replace(minute=0, second=0, microsecond=0)

    def reactors(self) -> List[Reactor]:
        return [
            Reactor(
                serial_no=serial,
                max_capacity_liters=liters,
                capacity_range=capacity_range,
                moc=moc,
                agitator_type=agitator,
                plant_name=plant,
                block_name=block,
                commission_date=commissioned
            )
            for serial, liters, capacity_range, moc, agitator, plant, block, commissioned in FLEET
        ]

    def bookings(self) -> List[Booking]:
        a = self.anchor
        return [
            Booking(
                id="B1",
                reactor_serial_no="R-101",
                team=Team.CDS,
                product_name="Paracetamol",
                stage="Intermediate",
                batch_number="BT-001",
                operation="Reflux",
                start_datetime=a - timedelta(days=2),
                end_datetime=a + timedelta(days=1),
                status=BookingStatus.CONFIRMED,
                requested_by_email="john.doe@facility.com",
                created_at=a - timedelta(days=5),
                updated_at=a - timedelta(days=2)
            ),
            Booking(
                id="B2",
                reactor_serial_no="R-101",
                team=Team.MFG,
                product_name="Ibuprofen",
                stage="Final",
                batch_number="BT-105",
                operation="Crystallization",
                start_datetime=a + timedelta(days=3),
                end_datetime=a + timedelta(days=6),
                status=BookingStatus.PROPOSED,
                requested_by_email="sarah.m@facility.com",
                created_at=a - timedelta(days=1),
                updated_at=a - timedelta(days=1)
            ),
            Booking(
                id="B3",
                reactor_serial_no="R-103",
                team=Team.TECH_TRANSFER,
                product_name="Metformin",
                stage="Scale-up",
                batch_number="TT-014",
                operation="Distillation",
                start_datetime=a - timedelta(days=1, hours=12),
                end_datetime=a + timedelta(hours=12),
                status=BookingStatus.CONFIRMED,
                requested_by_email="lee.k@facility.com",
                created_at=a - timedelta(days=3),
                updated_at=a - timedelta(days=3)
            ),
        ]

    def downtimes(self) -> List[MaintenanceWindow]:
        a = self.anchor
        return [
            MaintenanceWindow(
                id="D1",
                reactor_serial_no="R-102",
                start_datetime=a - timedelta(days=1),
                end_datetime=a + timedelta(days=1),
                type=DowntimeType.MAINTENANCE,
                reason="Annual calibration of sensors",
                updated_by_email="maint@facility.com",
                updated_at=a - timedelta(days=1),
                is_cancelled=False
            ),
        ]

    def build(self) -> Dict[str, list]:
        data = {
            "reactors": self.reactors(),
            "bookings": self.bookings(),
            "downtimes": self.downtimes()
        }
        logger.info(
            f"Generated demo fleet: {len(data['reactors'])} reactors, "
            f"{len(data['bookings'])} bookings, {len(data['downtimes'])} downtimes"
        )
        return data
