"""
Record Store.

This module acts as the 'Memory' of the planner.
It holds reactors, bookings and maintenance windows, and hands out a
per-reactor lock so that a check-then-act sequence (validate, then write)
runs as one unit for that reactor.

The store is also the authoritative write boundary: inserting a Confirmed
booking re-runs the exclusivity check under the reactor's lock, whatever
pre-checks the caller already did.
"""

import logging
import threading
from collections import defaultdict
from typing import Dict, List, Optional, Protocol

from models import Booking, MaintenanceWindow, Reactor
from .constraints import WriteRejected, check_confirmed_exclusivity

logger = logging.getLogger(__name__)


class RecordStore(Protocol):
    """What the lifecycle managers need from persistence."""

    def lock(self, reactor_serial_no: str): ...

    def list_reactors(self) -> List[Reactor]: ...
    def get_reactor(self, serial_no: str) -> Optional[Reactor]: ...
    def add_reactor(self, reactor: Reactor) -> None: ...
    def update_reactor(self, reactor: Reactor) -> None: ...
    def remove_reactor(self, serial_no: str) -> None: ...

    def list_bookings(self, reactor_serial_no: Optional[str] = None) -> List[Booking]: ...
    def get_booking(self, booking_id: str) -> Optional[Booking]: ...
    def add_booking(self, booking: Booking) -> None: ...
    def remove_booking(self, booking_id: str) -> None: ...

    def list_downtimes(self, reactor_serial_no: Optional[str] = None) -> List[MaintenanceWindow]: ...
    def get_downtime(self, downtime_id: str) -> Optional[MaintenanceWindow]: ...
    def add_downtime(self, downtime: MaintenanceWindow) -> None: ...
    def update_downtime(self, downtime: MaintenanceWindow) -> None: ...


class InMemoryRecordStore:
    """
    Process-local store. Lists returned by `list_*` are copies, so callers
    can scan them without holding a lock.
    """

    def __init__(self):
        """Initialize empty store."""
        self.reactors: Dict[str, Reactor] = {}
        self.bookings: Dict[str, Booking] = {}
        self.downtimes: Dict[str, MaintenanceWindow] = {}

        # Guards the dicts themselves
        self._data_lock = threading.RLock()

        # One lock per reactor, created lazily
        self._reactor_locks: Dict[str, threading.RLock] = defaultdict(threading.RLock)

    def lock(self, reactor_serial_no: str) -> threading.RLock:
        with self._data_lock:
            return self._reactor_locks[reactor_serial_no]

    # --- Reactors ---

    def list_reactors(self) -> List[Reactor]:
        with self._data_lock:
            return list(self.reactors.values())

    def get_reactor(self, serial_no: str) -> Optional[Reactor]:
        with self._data_lock:
            return self.reactors.get(serial_no)

    def add_reactor(self, reactor: Reactor) -> None:
        with self._data_lock:
            self.reactors[reactor.serial_no] = reactor

    def update_reactor(self, reactor: Reactor) -> None:
        with self._data_lock:
            self.reactors[reactor.serial_no] = reactor

    def remove_reactor(self, serial_no: str) -> None:
        with self._data_lock:
            self.reactors.pop(serial_no, None)

    # --- Bookings ---

    def list_bookings(self, reactor_serial_no: Optional[str] = None) -> List[Booking]:
        with self._data_lock:
            return [
                b for b in self.bookings.values()
                if reactor_serial_no is None or b.reactor_serial_no == reactor_serial_no
            ]

    def get_booking(self, booking_id: str) -> Optional[Booking]:
        with self._data_lock:
            return self.bookings.get(booking_id)

    def add_booking(self, booking: Booking) -> None:
        """Insert a booking, refusing a second confirmed log for the same instant."""
        with self.lock(booking.reactor_serial_no):
            if booking.is_confirmed:
                violation = check_confirmed_exclusivity(
                    booking.reactor_serial_no,
                    booking.start_datetime,
                    booking.end_datetime,
                    self.list_bookings(booking.reactor_serial_no)
                )
                if violation:
                    raise WriteRejected(violation)
            with self._data_lock:
                self.bookings[booking.id] = booking
        logger.info(f"Stored {booking.status.value} booking {booking.id} on {booking.reactor_serial_no}")

    def remove_booking(self, booking_id: str) -> None:
        with self._data_lock:
            self.bookings.pop(booking_id, None)

    # --- Maintenance Windows ---

    def list_downtimes(self, reactor_serial_no: Optional[str] = None) -> List[MaintenanceWindow]:
        with self._data_lock:
            return [
                d for d in self.downtimes.values()
                if reactor_serial_no is None or d.reactor_serial_no == reactor_serial_no
            ]

    def get_downtime(self, downtime_id: str) -> Optional[MaintenanceWindow]:
        with self._data_lock:
            return self.downtimes.get(downtime_id)

    def add_downtime(self, downtime: MaintenanceWindow) -> None:
        with self._data_lock:
            self.downtimes[downtime.id] = downtime

    def update_downtime(self, downtime: MaintenanceWindow) -> None:
        with self._data_lock:
            self.downtimes[downtime.id] = downtime

    def load(self, reactors, bookings, downtimes) -> None:
        """Bulk-load trusted historical records without re-validating them."""
        with self._data_lock:
            self.reactors.update({r.serial_no: r for r in reactors})
            self.bookings.update({b.id: b for b in bookings})
            self.downtimes.update({d.id: d for d in downtimes})

    def clear(self) -> None:
        """Reset state (useful for testing or reloading fixtures)."""
        with self._data_lock:
            self.reactors.clear()
            self.bookings.clear()
            self.downtimes.clear()
