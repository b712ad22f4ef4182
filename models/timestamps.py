"""
Timestamp normalization shared by the request models.

All scheduling arithmetic runs on naive local wall-clock time. Offset-aware
input (e.g. '2025-03-01T08:00:00Z') is converted to local time and stripped
of its tzinfo before it reaches the store.
"""

from datetime import datetime


def to_local_naive(v: datetime) -> datetime:
    if v.tzinfo is None:
        return v
    return v.astimezone().replace(tzinfo=None)
