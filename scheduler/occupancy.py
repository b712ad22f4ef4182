"""
Occupancy Aggregation Engine for the Reactor Planner.

This module turns committed time into utilization metrics.
Unlike the conflict resolver (binary Yes/No), this produces hours and
percentages per reactor per reporting period, always recomputed from the
current bookings and maintenance windows.
"""

import logging
from collections import defaultdict
from datetime import date as date_type
from typing import Dict, Iterable, List, Optional, Sequence

from models import (
    Booking,
    BookingStatus,
    MaintenanceWindow,
    Reactor,
    ReportingPeriod,
    OccupancyMetric,
    BlockSummary,
    TrendPoint
)
from .intervals import TimeRange, clip, hours

logger = logging.getLogger(__name__)

UNASSIGNED_BLOCK = "Unknown"


def _percent(part: int, whole: int) -> float:
    return (part / whole) * 100 if whole > 0 else 0.0


def _in_period_hours(start, end, period_range: TimeRange) -> int:
    return hours(clip(TimeRange(start, end), period_range))


def compute_occupancy(
    period: ReportingPeriod,
    reactors: Sequence[Reactor],
    bookings: Iterable[Booking],
    downtimes: Iterable[MaintenanceWindow]
) -> List[OccupancyMetric]:
    """
    One metric per reactor, in the order the reactors were given.
    Records straddling a period boundary only count their in-period portion.
    """
    period_range = TimeRange(period.start, period.end)
    total_hours = max(0, hours(period_range))

    # Index by reactor once instead of re-scanning per reactor
    proposed: Dict[str, int] = defaultdict(int)
    actual: Dict[str, int] = defaultdict(int)
    down: Dict[str, int] = defaultdict(int)

    for d in downtimes:
        if d.is_cancelled:
            continue
        down[d.reactor_serial_no] += _in_period_hours(d.start_datetime, d.end_datetime, period_range)

    for b in bookings:
        if b.status == BookingStatus.PROPOSED:
            bucket = proposed
        elif b.status == BookingStatus.CONFIRMED:
            bucket = actual
        elif b.status == BookingStatus.CANCELLED:
            continue
        else:
            raise ValueError(f"Unhandled booking status: {b.status!r}")
        bucket[b.reactor_serial_no] += _in_period_hours(b.start_datetime, b.end_datetime, period_range)

    metrics = []
    for reactor in reactors:
        serial = reactor.serial_no
        downtime_hours = down.get(serial, 0)
        available_hours = max(0, total_hours - downtime_hours)
        proposed_hours = proposed.get(serial, 0)
        actual_hours = actual.get(serial, 0)

        metrics.append(OccupancyMetric(
            reactor_serial_no=serial,
            period=period.label,
            available_hours=available_hours,
            proposed_hours=proposed_hours,
            actual_hours=actual_hours,
            downtime_hours=downtime_hours,
            proposed_percent=_percent(proposed_hours, available_hours),
            actual_percent=_percent(actual_hours, available_hours),
            plant_name=reactor.plant_name,
            block_name=reactor.block_name
        ))

    logger.debug(f"Computed occupancy for {len(metrics)} reactors over {period.label or period.start}")
    return metrics


def summarize_by_block(metrics: Iterable[OccupancyMetric]) -> List[BlockSummary]:
    """Average the percentages of every reactor in each block (first-seen order)."""
    grouped: Dict[str, List[OccupancyMetric]] = {}
    for m in metrics:
        grouped.setdefault(m.block_name or UNASSIGNED_BLOCK, []).append(m)

    return [
        BlockSummary(
            block_name=name,
            reactor_count=len(members),
            proposed_percent=sum(m.proposed_percent for m in members) / len(members),
            actual_percent=sum(m.actual_percent for m in members) / len(members)
        )
        for name, members in grouped.items()
    ]


def _shift_month(year: int, month: int, delta: int):
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def monthly_trend(
    reference: date_type,
    months: int,
    reactors: Sequence[Reactor],
    bookings: Iterable[Booking],
    downtimes: Iterable[MaintenanceWindow],
    plant: Optional[str] = None,
    block: Optional[str] = None
) -> List[TrendPoint]:
    """
    Average utilization for each of the `months` calendar months ending with
    the month containing `reference`, oldest first.
    """
    bookings = list(bookings)
    downtimes = list(downtimes)
    in_scope = [
        r for r in reactors
        if (plant is None or r.plant_name == plant) and (block is None or r.block_name == block)
    ]

    points = []
    for offset in range(months - 1, -1, -1):
        year, month = _shift_month(reference.year, reference.month, -offset)
        period = ReportingPeriod.for_month(year, month)
        metrics = compute_occupancy(period, in_scope, bookings, downtimes)

        if metrics:
            avg_proposed = sum(m.proposed_percent for m in metrics) / len(metrics)
            avg_actual = sum(m.actual_percent for m in metrics) / len(metrics)
        else:
            avg_proposed = avg_actual = 0.0

        points.append(TrendPoint(
            period=period.label,
            proposed_percent=avg_proposed,
            actual_percent=avg_actual
        ))
    return points
