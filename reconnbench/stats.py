"""
Outage statistics: count, average, min, max and nearest-rank percentiles.

Computed once, after all drivers have stopped.

Usage:
    from reconnbench.stats import reduce_intervals, format_report

    stats = reduce_intervals(collection.snapshot())
    print(format_report(stats))
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence

from reconnbench.models import Interval

DEFAULT_PERCENTILES: Sequence[int] = (50, 90, 95, 99)


def nearest_rank(sorted_values: Sequence[float], p: float) -> Optional[float]:
    """
    Nearest-rank percentile: the element at 1-based rank ceil(p/100 * N).

    No interpolation. Returns None for an empty sequence.
    """
    n = len(sorted_values)
    if n == 0:
        return None
    if not 0 < p <= 100:
        raise ValueError(f"percentile must be in (0, 100], got {p}")
    rank = max(1, math.ceil(p * n / 100))
    return sorted_values[min(rank, n) - 1]


@dataclass(frozen=True)
class OutageStats:
    """
    Summary of closed outage intervals.

    All durations are in seconds. With no intervals, count is 0 and every
    value is None ("no data").
    """

    count: int
    average_seconds: Optional[float]
    min_seconds: Optional[float]
    max_seconds: Optional[float]
    percentiles: Dict[int, Optional[float]]
    intervals: List[Interval] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return self.count == 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "count": self.count,
            "average_seconds": self.average_seconds,
            "min_seconds": self.min_seconds,
            "max_seconds": self.max_seconds,
            "percentiles": {f"p{p}": v for p, v in self.percentiles.items()},
            "intervals": [
                {
                    "started_at": i.started_at.isoformat(),
                    "ended_at": i.ended_at.isoformat(),
                    "duration_seconds": i.duration,
                }
                for i in self.intervals
            ],
        }


def reduce_intervals(
    intervals: Iterable[Interval],
    percentiles: Sequence[int] = DEFAULT_PERCENTILES,
) -> OutageStats:
    """
    Sort intervals by duration and summarize them.

    Args:
        intervals: Closed intervals, in any order.
        percentiles: Percentiles to report (nearest rank).

    Returns:
        OutageStats; intervals in the result are sorted by duration.
    """
    ordered = sorted(intervals, key=lambda i: i.duration)
    durations = [i.duration for i in ordered]

    if not durations:
        return OutageStats(
            count=0,
            average_seconds=None,
            min_seconds=None,
            max_seconds=None,
            percentiles={p: None for p in percentiles},
        )

    return OutageStats(
        count=len(durations),
        average_seconds=sum(durations) / len(durations),
        min_seconds=durations[0],
        max_seconds=durations[-1],
        percentiles={p: nearest_rank(durations, p) for p in percentiles},
        intervals=ordered,
    )


def format_report(stats: OutageStats, *, include_intervals: bool = True) -> str:
    """
    Format stats as human-readable text.

    Returns:
        Multi-line report, e.g. "Total tests: 10" ... "99% <= 4.210".
    """
    if stats.is_empty:
        return "No outage intervals recorded."

    lines = []
    if include_intervals:
        lines.append("Intervals are " + ",".join(str(i) for i in stats.intervals))
    lines.append(f"Total tests: {stats.count}")
    lines.append(f"Average (Seconds): {_fmt(stats.average_seconds)}")
    lines.append(f"Min (Seconds): {_fmt(stats.min_seconds)}")
    lines.append(f"Max (Seconds): {_fmt(stats.max_seconds)}")
    for p, value in stats.percentiles.items():
        lines.append(f"{p}% <= {_fmt(value)}")
    return "\n".join(lines)


def _fmt(val: Optional[float], decimals: int = 3) -> str:
    """Format a value, handling None."""
    if val is None:
        return "N/A"
    return f"{val:.{decimals}f}"
