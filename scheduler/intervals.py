"""
Interval arithmetic shared by the conflict resolver and the occupancy report.

All ranges are half-open [start, end): touching endpoints do not overlap.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

SECONDS_PER_HOUR = 3600


@dataclass(frozen=True)
class TimeRange:
    start: datetime
    end: datetime

    @property
    def is_empty(self) -> bool:
        return self.end <= self.start


def overlaps(a: TimeRange, b: TimeRange, inclusive: bool = False) -> bool:
    """
    Standard overlap: StartA < EndB and StartB < EndA.
    With `inclusive=True` ranges that merely touch also count.
    """
    if inclusive:
        return a.start <= b.end and b.start <= a.end
    return a.start < b.end and b.start < a.end


def clip(interval: TimeRange, boundary: TimeRange) -> Optional[TimeRange]:
    """Intersect `interval` with `boundary`. Returns None when nothing is left."""
    start = max(interval.start, boundary.start)
    end = min(interval.end, boundary.end)
    if end <= start:
        return None
    return TimeRange(start, end)


def hours(interval: Optional[TimeRange]) -> int:
    """Whole hours in the range, truncated toward zero (a 90 minute range is 1)."""
    if interval is None or interval.is_empty:
        return 0
    return int((interval.end - interval.start).total_seconds() // SECONDS_PER_HOUR)
