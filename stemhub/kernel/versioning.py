"""
Versioned mutation contract for stems and segments.

- Create stamps version 1 and the acting user.
- Every successful update is ``version = version + 1`` computed by the
  database in the same UPDATE, so two concurrent writers each land exactly
  one increment. There is no compare-and-swap against a client-supplied
  version: the counter records change count for downstream conflict
  detection, it does not reject stale writers.

Segment timing rules and interval overlap also live here since every
segment write goes through them.
"""

import uuid
from typing import Any, Dict, Optional

from stemhub.kernel.errors import InputValidationError

INITIAL_VERSION = 1

# 10 minutes in milliseconds
DEFAULT_MAX_SEGMENT_DURATION_MS = 600_000


def creation_stamp(actor_id: uuid.UUID) -> Dict[str, Any]:
    """Column values every new versioned resource starts with."""
    return {"version": INITIAL_VERSION, "last_modified_by": actor_id}


def update_stamp(model: Any, actor_id: uuid.UUID) -> Dict[str, Any]:
    """
    Column values every successful update writes.

    ``model.version + 1`` is a SQL expression, evaluated server-side.
    """
    return {"version": model.version + 1, "last_modified_by": actor_id}


def validate_segment_timing(
    start_time: Optional[float],
    end_time: Optional[float],
    max_duration: float = DEFAULT_MAX_SEGMENT_DURATION_MS,
) -> None:
    """
    Check a segment interval.

    Raises:
        InputValidationError: a missing bound, negative start, empty or
            inverted interval, or a duration above ``max_duration``
    """
    details = {"start_time": start_time, "end_time": end_time}
    if start_time is None or end_time is None:
        raise InputValidationError(
            "Invalid segment timing: start and end time are required", details
        )
    if start_time < 0:
        raise InputValidationError("Invalid segment timing: start time cannot be negative", details)
    if end_time <= start_time:
        raise InputValidationError("Invalid segment timing: end time must be after start time", details)
    if end_time - start_time > max_duration:
        raise InputValidationError(
            f"Invalid segment timing: duration cannot exceed {max_duration:g} ms",
            {**details, "max_duration": max_duration},
        )


def intervals_overlap(a_start: float, a_end: float, b_start: float, b_end: float) -> bool:
    """Whether half-open intervals [a_start, a_end) and [b_start, b_end) intersect."""
    return a_start < b_end and b_start < a_end
