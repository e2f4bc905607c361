"""Overlap detection between clock-time ranges."""

from typing import List, Optional, Protocol, Sequence, Tuple

from timewheel.engine.time_utils import get_time_segments


class TimeRange(Protocol):
    start_time: str
    end_time: str


def do_time_ranges_overlap(start_a: str, end_a: str, start_b: str, end_b: str) -> bool:
    """Check whether two ranges (each possibly crossing midnight) overlap.

    Uses half-open intervals: ranges that merely touch do not overlap, and a
    zero-length range overlaps nothing.
    """
    for a_start, a_end in get_time_segments(start_a, end_a):
        for b_start, b_end in get_time_segments(start_b, end_b):
            if a_start < b_end and b_start < a_end:
                return True
    return False


def has_overlap_with_tasks(candidate: TimeRange, tasks: Sequence[TimeRange]) -> bool:
    return any(
        do_time_ranges_overlap(candidate.start_time, candidate.end_time, t.start_time, t.end_time)
        for t in tasks
    )


def find_overlapping_tasks(
    start_time: str,
    end_time: str,
    tasks: Sequence,
    ignore_task_id: Optional[str] = None,
) -> List:
    """Return the tasks whose range overlaps [start_time, end_time).

    Args:
        start_time: Range start ("HH:MM")
        end_time: Range end ("HH:MM")
        tasks: Tasks to check, in order
        ignore_task_id: Task id to exclude (the task being edited)

    Returns:
        Overlapping tasks in their original order
    """
    return [
        t for t in tasks
        if ignore_task_id is None or t.id != ignore_task_id
        if do_time_ranges_overlap(start_time, end_time, t.start_time, t.end_time)
    ]


def find_conflicting_pairs(tasks: Sequence[TimeRange]) -> List[Tuple[int, int]]:
    """All index pairs (i, j), i < j, of mutually overlapping tasks."""
    pairs: List[Tuple[int, int]] = []
    for i in range(len(tasks)):
        for j in range(i + 1, len(tasks)):
            a, b = tasks[i], tasks[j]
            if do_time_ranges_overlap(a.start_time, a.end_time, b.start_time, b.end_time):
                pairs.append((i, j))
    return pairs
