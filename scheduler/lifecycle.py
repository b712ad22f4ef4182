"""
Reactor Planner lifecycle managers.

These are the only writers of the record store. Each operation follows the
same pipeline:
1. Look up the target and apply the record's own lifecycle rules (immutability, timing).
2. Run the conflict resolver against a snapshot taken under the reactor lock.
3. Commit to the store while still holding that lock.

Rejections come back as `Violation` objects, never as exceptions.
"""

import logging
import uuid
from datetime import datetime
from typing import Callable, Optional, Union

from models import (
    Booking,
    BookingRequest,
    BookingStatus,
    MaintenanceRequest,
    MaintenanceWindow,
    Reactor
)
from .constraints import (
    Violation,
    ViolationKind,
    WriteRejected,
    check_conflict,
    check_interval,
    validate_booking
)
from .store import RecordStore

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _new_id() -> str:
    return str(uuid.uuid4())


def _not_found(what: str, record_id: str) -> Violation:
    return Violation(ViolationKind.NOT_FOUND, f"{what} {record_id} not found", record_id)


class ReactorManager:
    """Administrative registry of reactors."""

    def __init__(self, store: RecordStore):
        self.store = store

    def add(self, reactor: Reactor) -> Union[Reactor, Violation]:
        with self.store.lock(reactor.serial_no):
            if self.store.get_reactor(reactor.serial_no):
                return Violation(
                    ViolationKind.DUPLICATE_RESOURCE,
                    "Reactor serial number must be unique.",
                    reactor.serial_no
                )
            self.store.add_reactor(reactor)
        logger.info(f"Registered reactor {reactor.serial_no}")
        return reactor

    def update(self, reactor: Reactor) -> Union[Reactor, Violation]:
        with self.store.lock(reactor.serial_no):
            if not self.store.get_reactor(reactor.serial_no):
                return _not_found("Reactor", reactor.serial_no)
            self.store.update_reactor(reactor)
        return reactor

    def delete(self, serial_no: str) -> Optional[Violation]:
        """
        Deletion is blocked while any booking or maintenance window still
        references the reactor, so audit records never point at nothing.
        """
        with self.store.lock(serial_no):
            if not self.store.get_reactor(serial_no):
                return _not_found("Reactor", serial_no)

            dependents = len(self.store.list_bookings(serial_no)) + len(self.store.list_downtimes(serial_no))
            if dependents:
                logger.warning(f"Refusing to delete reactor {serial_no}: {dependents} dependent records")
                return Violation(
                    ViolationKind.RESOURCE_IN_USE,
                    f"Reactor {serial_no} still has {dependents} bookings or maintenance windows.",
                    serial_no
                )
            self.store.remove_reactor(serial_no)
        logger.info(f"Removed reactor {serial_no}")
        return None


class BookingManager:
    """
    Creation and deletion policy for bookings.
    There is deliberately no update operation.
    """

    def __init__(self, store: RecordStore, clock: Clock = datetime.now):
        self.store = store
        self.clock = clock

    def check(self, request: BookingRequest) -> Optional[Violation]:
        """Advisory pre-check, identical to what `submit` enforces."""
        if self.store.get_reactor(request.reactor_serial_no) is None:
            return _not_found("Reactor", request.reactor_serial_no)
        return validate_booking(
            request.reactor_serial_no,
            request.start_datetime,
            request.end_datetime,
            request.status,
            self.store.list_bookings(request.reactor_serial_no),
            self.store.list_downtimes(request.reactor_serial_no)
        )

    def submit(self, request: BookingRequest) -> Union[Booking, Violation]:
        if request.status == BookingStatus.CONFIRMED:
            return self.confirm(request)
        return self.propose(request)

    def propose(self, request: BookingRequest) -> Union[Booking, Violation]:
        """Create a Proposed booking (a forecast of reactor usage)."""
        return self._create(request.model_copy(update={"status": BookingStatus.PROPOSED}))

    def confirm(self, request: BookingRequest) -> Union[Booking, Violation]:
        """Create a Confirmed work log. It can never be changed or deleted afterwards."""
        return self._create(request.model_copy(update={"status": BookingStatus.CONFIRMED}))

    def _create(self, request: BookingRequest) -> Union[Booking, Violation]:
        with self.store.lock(request.reactor_serial_no):
            violation = self.check(request)
            if violation:
                logger.info(f"Booking rejected on {request.reactor_serial_no}: {violation.reason}")
                return violation

            now = self.clock()
            booking = Booking(
                **request.model_dump(),
                id=_new_id(),
                created_at=now,
                updated_at=now
            )
            try:
                self.store.add_booking(booking)
            except WriteRejected as e:
                logger.warning(f"Store rejected booking on {request.reactor_serial_no}: {e.violation.reason}")
                return e.violation
        return booking

    def delete(self, booking_id: str) -> Optional[Violation]:
        """Remove a Proposed booking. Confirmed logs are immutable."""
        booking = self.store.get_booking(booking_id)
        if booking is None:
            return _not_found("Booking", booking_id)

        with self.store.lock(booking.reactor_serial_no):
            booking = self.store.get_booking(booking_id)
            if booking is None:
                return _not_found("Booking", booking_id)
            if booking.is_confirmed:
                return Violation(
                    ViolationKind.IMMUTABLE_RECORD,
                    "Confirmed work logs are immutable and cannot be deleted for audit compliance.",
                    booking_id
                )
            self.store.remove_booking(booking_id)
        logger.info(f"Deleted proposed booking {booking_id}")
        return None


class DowntimeManager:
    """Scheduling, rescheduling and cancellation of maintenance windows."""

    def __init__(self, store: RecordStore, clock: Clock = datetime.now):
        self.store = store
        self.clock = clock

    def _validate_window(
        self,
        reactor_serial_no: str,
        start: datetime,
        end: datetime,
        exclude_id: Optional[str] = None
    ) -> Optional[Violation]:
        # 1. Future Date Check (strict)
        if start <= self.clock():
            return Violation(
                ViolationKind.PAST_SCHEDULING,
                "Downtime must be scheduled in the future.",
                exclude_id
            )

        violation = check_interval(start, end)
        if violation: return violation

        # 2. Conflict Check with Bookings and other Downtimes
        return check_conflict(
            reactor_serial_no,
            start,
            end,
            self.store.list_bookings(reactor_serial_no),
            self.store.list_downtimes(reactor_serial_no),
            exclude_id
        )

    def _lifecycle_violation(self, downtime: MaintenanceWindow) -> Optional[Violation]:
        if downtime.is_cancelled:
            return Violation(
                ViolationKind.IMMUTABLE_RECORD,
                "Cancelled maintenance windows cannot be changed.",
                downtime.id
            )
        if downtime.has_elapsed(self.clock()):
            return Violation(
                ViolationKind.IMMUTABLE_RECORD,
                "Completed maintenance windows cannot be changed.",
                downtime.id
            )
        return None

    def schedule(self, request: MaintenanceRequest) -> Union[MaintenanceWindow, Violation]:
        with self.store.lock(request.reactor_serial_no):
            if self.store.get_reactor(request.reactor_serial_no) is None:
                return _not_found("Reactor", request.reactor_serial_no)

            violation = self._validate_window(
                request.reactor_serial_no,
                request.start_datetime,
                request.end_datetime
            )
            if violation:
                logger.info(f"Downtime rejected on {request.reactor_serial_no}: {violation.reason}")
                return violation

            downtime = MaintenanceWindow(
                **request.model_dump(),
                id=_new_id(),
                updated_at=self.clock(),
                is_cancelled=False
            )
            self.store.add_downtime(downtime)
        logger.info(f"Scheduled {downtime.type.value} on {downtime.reactor_serial_no} ({downtime.id})")
        return downtime

    def reschedule(self, downtime_id: str, start: datetime, end: datetime) -> Union[MaintenanceWindow, Violation]:
        existing = self.store.get_downtime(downtime_id)
        if existing is None:
            return _not_found("Maintenance window", downtime_id)

        with self.store.lock(existing.reactor_serial_no):
            # Re-read under the lock: a concurrent cancel may have landed
            existing = self.store.get_downtime(downtime_id)
            violation = self._lifecycle_violation(existing)
            if violation: return violation

            violation = self._validate_window(existing.reactor_serial_no, start, end, exclude_id=downtime_id)
            if violation:
                logger.info(f"Reschedule of {downtime_id} rejected: {violation.reason}")
                return violation

            updated = existing.model_copy(update={
                "start_datetime": start,
                "end_datetime": end,
                "updated_at": self.clock()
            })
            self.store.update_downtime(updated)
        logger.info(f"Rescheduled maintenance window {downtime_id}")
        return updated

    def cancel(self, downtime_id: str) -> Union[MaintenanceWindow, Violation]:
        """Soft cancel: the window stays on record but stops blocking the reactor."""
        existing = self.store.get_downtime(downtime_id)
        if existing is None:
            return _not_found("Maintenance window", downtime_id)

        with self.store.lock(existing.reactor_serial_no):
            existing = self.store.get_downtime(downtime_id)
            violation = self._lifecycle_violation(existing)
            if violation: return violation

            cancelled = existing.model_copy(update={"is_cancelled": True, "updated_at": self.clock()})
            self.store.update_downtime(cancelled)
        logger.info(f"Cancelled maintenance window {downtime_id}")
        return cancelled
