# api.py
import logging
from datetime import datetime
from typing import List, Optional

import fastapi
from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, field_validator

from models import (
    Booking,
    BookingRequest,
    BlockSummary,
    MaintenanceRequest,
    OccupancyMetric,
    Reactor,
    ReportingPeriod,
    TrendPoint,
    to_local_naive
)
from scheduler.constraints import Violation, ViolationKind
from scheduler.lifecycle import BookingManager, DowntimeManager, ReactorManager
from scheduler.occupancy import compute_occupancy, monthly_trend, summarize_by_block
from scheduler.store import InMemoryRecordStore, RecordStore

logger = logging.getLogger(__name__)

router = APIRouter()


class Planner:
    """Everything a request handler needs, shared through app.state."""

    def __init__(self, store: RecordStore, clock=datetime.now):
        self.store = store
        self.clock = clock
        self.reactors = ReactorManager(store)
        self.bookings = BookingManager(store, clock)
        self.downtimes = DowntimeManager(store, clock)


class RescheduleRequest(BaseModel):
    start_datetime: datetime
    end_datetime: datetime

    @field_validator('start_datetime', 'end_datetime')
    @classmethod
    def normalize_timezone(cls, v):
        return to_local_naive(v)


class CheckResult(BaseModel):
    ok: bool
    kind: Optional[str] = None
    reason: Optional[str] = None


def get_planner(request: Request) -> Planner:
    return request.app.state.planner


def violation_response(violation: Violation) -> JSONResponse:
    code = 404 if violation.kind == ViolationKind.NOT_FOUND else 400
    return JSONResponse(
        status_code=code,
        content={"reason": violation.reason, "kind": violation.kind.value}
    )


def parse_month(month: Optional[str], planner: Planner) -> ReportingPeriod:
    if month is None:
        return ReportingPeriod.containing(planner.clock())
    try:
        parsed = datetime.strptime(month, "%Y-%m")
    except ValueError:
        raise HTTPException(status_code=422, detail="month must look like YYYY-MM")
    return ReportingPeriod.for_month(parsed.year, parsed.month)


# --- Reactors ---

@router.get("/reactors", response_model=List[Reactor])
async def list_reactors(planner: Planner = Depends(get_planner)):
    return planner.store.list_reactors()

@router.post("/reactors", response_model=Reactor)
async def create_reactor(reactor: Reactor, planner: Planner = Depends(get_planner)):
    result = planner.reactors.add(reactor)
    if isinstance(result, Violation):
        return violation_response(result)
    return result

@router.put("/reactors/{serial_no}", response_model=Reactor)
async def update_reactor(serial_no: str, reactor: Reactor, planner: Planner = Depends(get_planner)):
    if reactor.serial_no != serial_no:
        raise HTTPException(status_code=400, detail="Serial number in path and body differ")
    result = planner.reactors.update(reactor)
    if isinstance(result, Violation):
        return violation_response(result)
    return result

@router.delete("/reactors/{serial_no}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_reactor(serial_no: str, planner: Planner = Depends(get_planner)):
    violation = planner.reactors.delete(serial_no)
    if violation:
        return violation_response(violation)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# --- Commitments (bookings) ---

@router.get("/commitments", response_model=List[Booking])
async def list_commitments(reactor: Optional[str] = None, planner: Planner = Depends(get_planner)):
    bookings = planner.store.list_bookings(reactor)
    return sorted(bookings, key=lambda b: b.start_datetime)

@router.post("/commitments/check", response_model=CheckResult)
async def check_commitment(booking: BookingRequest, planner: Planner = Depends(get_planner)):
    """Advisory form pre-check; the authoritative check runs again on submit."""
    violation = planner.bookings.check(booking)
    if violation:
        return CheckResult(ok=False, kind=violation.kind.value, reason=violation.reason)
    return CheckResult(ok=True)

@router.post("/commitments", response_model=Booking)
async def create_commitment(booking: BookingRequest, planner: Planner = Depends(get_planner)):
    result = planner.bookings.submit(booking)
    if isinstance(result, Violation):
        return violation_response(result)
    return result

@router.delete("/commitments/{booking_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_commitment(booking_id: str, planner: Planner = Depends(get_planner)):
    violation = planner.bookings.delete(booking_id)
    if violation:
        return violation_response(violation)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# --- Maintenance windows ---

def _with_status(window, now: datetime) -> dict:
    payload = window.model_dump(mode="json")
    payload["status"] = window.status(now).value
    return payload

@router.get("/maintenance-windows")
async def list_maintenance_windows(reactor: Optional[str] = None, planner: Planner = Depends(get_planner)):
    now = planner.clock()
    windows = sorted(planner.store.list_downtimes(reactor), key=lambda d: d.start_datetime)
    return [_with_status(w, now) for w in windows]

@router.post("/maintenance-windows")
async def schedule_maintenance(request: MaintenanceRequest, planner: Planner = Depends(get_planner)):
    result = planner.downtimes.schedule(request)
    if isinstance(result, Violation):
        return violation_response(result)
    return _with_status(result, planner.clock())

@router.post("/maintenance-windows/{downtime_id}/reschedule")
async def reschedule_maintenance(downtime_id: str, window: RescheduleRequest, planner: Planner = Depends(get_planner)):
    result = planner.downtimes.reschedule(downtime_id, window.start_datetime, window.end_datetime)
    if isinstance(result, Violation):
        return violation_response(result)
    return _with_status(result, planner.clock())

@router.post("/maintenance-windows/{downtime_id}/cancel")
async def cancel_maintenance(downtime_id: str, planner: Planner = Depends(get_planner)):
    result = planner.downtimes.cancel(downtime_id)
    if isinstance(result, Violation):
        return violation_response(result)
    return _with_status(result, planner.clock())


# --- Occupancy reporting ---

def _metrics_for(period: ReportingPeriod, planner: Planner) -> List[OccupancyMetric]:
    store = planner.store
    return compute_occupancy(period, store.list_reactors(), store.list_bookings(), store.list_downtimes())

@router.get("/occupancy", response_model=List[OccupancyMetric])
async def occupancy(month: Optional[str] = None, planner: Planner = Depends(get_planner)):
    return _metrics_for(parse_month(month, planner), planner)

@router.get("/occupancy/blocks", response_model=List[BlockSummary])
async def occupancy_by_block(month: Optional[str] = None, planner: Planner = Depends(get_planner)):
    return summarize_by_block(_metrics_for(parse_month(month, planner), planner))

@router.get("/occupancy/trend", response_model=List[TrendPoint])
async def occupancy_trend(
    months: int = Query(default=6, ge=1, le=24),
    plant: Optional[str] = None,
    block: Optional[str] = None,
    planner: Planner = Depends(get_planner)
):
    store = planner.store
    return monthly_trend(
        planner.clock(), months,
        store.list_reactors(), store.list_bookings(), store.list_downtimes(),
        plant=plant, block=block
    )


def create_app(store: Optional[RecordStore] = None, clock=datetime.now) -> fastapi.FastAPI:
    app = fastapi.FastAPI(title="Reactor Planner")
    app.state.planner = Planner(store or InMemoryRecordStore(), clock)
    app.include_router(router)
    return app


app = create_app()
