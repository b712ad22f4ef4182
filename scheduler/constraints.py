"""
Hard Constraint Validation Logic.

This module answers the binary question: "Can Reactor X be claimed from A to B?"
It enforces physical reality (one batch per vessel at a time), blocking
maintenance, and the single-confirmed-log rule that protects the audit trail.

Nothing here raises for a rejected candidate: every check returns a
`Violation` (or None) and the caller decides how to surface it.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Iterable, Optional

from models import Booking, BookingStatus, MaintenanceWindow
from .intervals import TimeRange, overlaps

logger = logging.getLogger(__name__)

TIME_FORMAT = "%b %d %H:%M"


class ViolationKind(str, Enum):
    INVALID_INTERVAL = "InvalidInterval"
    RESOURCE_OVERLAP = "ResourceOverlapConflict"
    CONFIRMED_EXCLUSIVITY = "ConfirmedExclusivityViolation"
    PAST_SCHEDULING = "PastSchedulingViolation"
    IMMUTABLE_RECORD = "ImmutableRecordViolation"
    NOT_FOUND = "NotFound"
    DUPLICATE_RESOURCE = "DuplicateResource"
    RESOURCE_IN_USE = "ResourceInUse"


@dataclass
class Violation:
    """Detailed reason for rejection."""
    kind: ViolationKind
    reason: str
    record_id: Optional[str] = None  # the colliding or targeted record


class WriteRejected(Exception):
    """Raised by a record store when an insert breaks an invariant."""

    def __init__(self, violation: Violation):
        super().__init__(violation.reason)
        self.violation = violation


def check_interval(start: datetime, end: datetime) -> Optional[Violation]:
    if end <= start:
        return Violation(ViolationKind.INVALID_INTERVAL, "End time must be after start time.")
    return None


def blocks_new_bookings(booking: Booking) -> bool:
    """Whether an existing booking occupies its reactor."""
    if booking.status == BookingStatus.PROPOSED:
        return True
    if booking.status == BookingStatus.CONFIRMED:
        return True
    if booking.status == BookingStatus.CANCELLED:
        return False
    raise ValueError(f"Unhandled booking status: {booking.status!r}")


def check_conflict(
    reactor_serial_no: str,
    start: datetime,
    end: datetime,
    bookings: Iterable[Booking],
    downtimes: Iterable[MaintenanceWindow],
    exclude_id: Optional[str] = None
) -> Optional[Violation]:
    """
    Master validation function. Returns None if Valid, Violation object if Invalid.

    Collections may span every reactor; filtering by serial happens here.
    `exclude_id` lets a record being rescheduled ignore itself.
    """

    # 1. Sequence integrity
    violation = check_interval(start, end)
    if violation: return violation

    candidate = TimeRange(start, end)

    # 2. Booking conflicts (Proposed and Confirmed both occupy the vessel)
    for b in bookings:
        if b.reactor_serial_no != reactor_serial_no or b.id == exclude_id:
            continue
        if not blocks_new_bookings(b):
            continue
        if overlaps(candidate, TimeRange(b.start_datetime, b.end_datetime)):
            return Violation(
                ViolationKind.RESOURCE_OVERLAP,
                f"Conflict: Reactor already booked for {b.product_name} "
                f"({b.start_datetime.strftime(TIME_FORMAT)} - {b.end_datetime.strftime(TIME_FORMAT)})",
                b.id
            )

    # 3. Downtime conflicts
    for d in downtimes:
        if d.reactor_serial_no != reactor_serial_no or d.id == exclude_id:
            continue
        if d.is_cancelled:
            continue
        if overlaps(candidate, TimeRange(d.start_datetime, d.end_datetime)):
            return Violation(
                ViolationKind.RESOURCE_OVERLAP,
                f"Conflict: Reactor unavailable due to {d.type.value} maintenance.",
                d.id
            )

    return None # All clear!


def check_confirmed_exclusivity(
    reactor_serial_no: str,
    start: datetime,
    end: datetime,
    bookings: Iterable[Booking]
) -> Optional[Violation]:
    """
    Only one Confirmed work log may hold any instant on a reactor.
    Stricter than the general check: touching boundaries also collide.
    """
    candidate = TimeRange(start, end)
    for b in bookings:
        if b.reactor_serial_no != reactor_serial_no or not b.is_confirmed:
            continue
        if overlaps(candidate, TimeRange(b.start_datetime, b.end_datetime), inclusive=True):
            return Violation(
                ViolationKind.CONFIRMED_EXCLUSIVITY,
                "Security Violation: A confirmed work log already exists for this period.",
                b.id
            )
    return None


def validate_booking(
    reactor_serial_no: str,
    start: datetime,
    end: datetime,
    status: BookingStatus,
    bookings: Iterable[Booking],
    downtimes: Iterable[MaintenanceWindow]
) -> Optional[Violation]:
    """
    Full admission check for a new booking of the given status.
    Used both as the advisory form pre-check and by the booking manager.
    """
    bookings = list(bookings)

    violation = check_interval(start, end)
    if violation: return violation

    if status == BookingStatus.CONFIRMED:
        violation = check_confirmed_exclusivity(reactor_serial_no, start, end, bookings)
        if violation:
            logger.warning(f"Duplicate confirmed log rejected on {reactor_serial_no}: {violation.record_id}")
            return violation

    return check_conflict(reactor_serial_no, start, end, bookings, downtimes)
