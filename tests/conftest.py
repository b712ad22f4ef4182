"""Shared fixtures: a fixed clock in mid-February 2025 and record builders."""

import itertools
from datetime import datetime

import pytest

from models import (
    Booking,
    BookingRequest,
    BookingStatus,
    DowntimeType,
    MaintenanceRequest,
    MaintenanceWindow,
    Reactor,
    Team
)
from scheduler.store import InMemoryRecordStore

NOW = datetime(2025, 2, 15, 12, 0)

_ids = itertools.count(1)


def make_reactor(serial_no="R-101", plant="Plant Alpha", block="Block A") -> Reactor:
    return Reactor(
        serial_no=serial_no,
        max_capacity_liters=1000,
        capacity_range="500-1000L",
        moc="SS316",
        agitator_type="Anchor",
        plant_name=plant,
        block_name=block
    )


def make_request(start, end, reactor="R-101", status=BookingStatus.PROPOSED, product="Paracetamol") -> BookingRequest:
    return BookingRequest(
        reactor_serial_no=reactor,
        team=Team.CDS,
        product_name=product,
        stage="Intermediate",
        batch_number="BT-001",
        operation="Reflux",
        start_datetime=start,
        end_datetime=end,
        status=status,
        requested_by_email="john.doe@facility.com"
    )


def make_booking(start, end, reactor="R-101", status=BookingStatus.PROPOSED, product="Paracetamol", booking_id=None) -> Booking:
    return Booking(
        **make_request(start, end, reactor, BookingStatus.PROPOSED, product).model_dump(exclude={"status"}),
        status=status,
        id=booking_id or f"B{next(_ids)}",
        created_at=NOW,
        updated_at=NOW
    )


def make_downtime(start, end, reactor="R-101", cancelled=False, kind=DowntimeType.MAINTENANCE, downtime_id=None) -> MaintenanceWindow:
    return MaintenanceWindow(
        id=downtime_id or f"D{next(_ids)}",
        reactor_serial_no=reactor,
        start_datetime=start,
        end_datetime=end,
        type=kind,
        reason="Planned work",
        updated_by_email="maint@facility.com",
        updated_at=NOW,
        is_cancelled=cancelled
    )


def make_maintenance_request(start, end, reactor="R-101", kind=DowntimeType.MAINTENANCE) -> MaintenanceRequest:
    return MaintenanceRequest(
        reactor_serial_no=reactor,
        start_datetime=start,
        end_datetime=end,
        type=kind,
        reason="Planned work",
        updated_by_email="maint@facility.com"
    )


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def store():
    store = InMemoryRecordStore()
    store.add_reactor(make_reactor("R-101"))
    store.add_reactor(make_reactor("R-102"))
    return store
