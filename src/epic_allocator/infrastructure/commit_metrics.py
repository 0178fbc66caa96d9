"""Commit metrics as pure functions over commit records.

Functions:
- is_on_time: fixed on-time window check for a commit timestamp
- message_quality_points: 0..85 heuristic for one commit message
- compute_consistency: 0..100 score from the mean inter-commit interval
- compute_hourly_activity / compute_weekday_activity: activity histograms
- compute_consistency_timeline: bounded day-gap series for charts
- compute_size_distribution: commit size histogram
- compute_file_type_counts: extension histogram over touched files
"""

from __future__ import annotations

import math
import re
from collections import Counter
from datetime import datetime

from epic_allocator.domain.models import (
    FileStat,
    FileTypeCount,
    HourlyBucket,
    SizeBucket,
    TimelinePoint,
    WeekdayBucket,
)

# Hours 1..23 are on-time, hour 0 is late. Policy constant, not configurable.
ON_TIME_FIRST_HOUR = 1
ON_TIME_LAST_HOUR = 23

_CONVENTIONAL_PREFIX = re.compile(r"^(feat|fix|docs|style|refactor|test|chore):")
_ISSUE_REFERENCE = re.compile(r"#\d+")
_EXTENSION = re.compile(r"\.([^.]+)$")

_WEEKDAY_LABELS = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]

# (label, inclusive upper bound); the last bucket is open-ended
_SIZE_BUCKETS: list[tuple[str, float]] = [
    ("0-50", 50),
    ("51-100", 100),
    ("101-200", 200),
    ("201-500", 500),
    ("500+", math.inf),
]

MAX_TIMELINE_POINTS = 30

_SECONDS_PER_DAY = 86400


def is_on_time(timestamp: datetime) -> bool:
    return ON_TIME_FIRST_HOUR <= timestamp.hour <= ON_TIME_LAST_HOUR


def message_quality_points(message: str) -> int:
    """Score one commit message: length, conventional prefix, issue reference."""
    points = 0
    if len(message) > 10:
        points += 10
    if len(message) > 30:
        points += 25
    if _CONVENTIONAL_PREFIX.match(message):
        points += 25
    if _ISSUE_REFERENCE.search(message):
        points += 25
    return points


def _day_gaps(timestamps: list[datetime]) -> list[float]:
    ordered = sorted(timestamps)
    return [
        (ordered[i] - ordered[i - 1]).total_seconds() / _SECONDS_PER_DAY
        for i in range(1, len(ordered))
    ]


def compute_consistency(timestamps: list[datetime]) -> float:
    """100 - 5 * mean interval in days, clamped to [0, 100].

    Fewer than 2 commits → 0.0.
    """
    gaps = _day_gaps(timestamps)
    if not gaps:
        return 0.0
    mean_interval = sum(gaps) / len(gaps)
    return max(0.0, min(100.0, 100.0 - mean_interval * 5))


def compute_hourly_activity(timestamps: list[datetime]) -> list[HourlyBucket]:
    counts = [0] * 24
    for ts in timestamps:
        counts[ts.hour] += 1
    return [HourlyBucket(hour=f"{h}:00", commits=c) for h, c in enumerate(counts)]


def compute_weekday_activity(timestamps: list[datetime]) -> list[WeekdayBucket]:
    """Commit counts per weekday, Sunday first."""
    counts = [0] * 7
    for ts in timestamps:
        # datetime.weekday() is Monday=0; shift so Sunday=0
        counts[(ts.weekday() + 1) % 7] += 1
    return [
        WeekdayBucket(day=label, commits=counts[i])
        for i, label in enumerate(_WEEKDAY_LABELS)
    ]


def compute_consistency_timeline(
    timestamps: list[datetime], max_points: int = MAX_TIMELINE_POINTS,
) -> list[TimelinePoint]:
    """Day gaps between consecutive commits, at most *max_points* long.

    Fewer than 2 commits → a single zero point so charts always have data.
    """
    gaps = _day_gaps(timestamps)[:max_points]
    if not gaps:
        return [TimelinePoint(commit="#1", days=0.0)]
    return [
        TimelinePoint(commit=f"#{i + 1}", days=round(gap, 1))
        for i, gap in enumerate(gaps)
    ]


def compute_size_distribution(sizes: list[int]) -> list[SizeBucket]:
    counts = [0] * len(_SIZE_BUCKETS)
    for size in sizes:
        for i, (_label, upper) in enumerate(_SIZE_BUCKETS):
            if size <= upper:
                counts[i] += 1
                break
    return [
        SizeBucket(label=label, count=counts[i])
        for i, (label, _upper) in enumerate(_SIZE_BUCKETS)
    ]


def file_extension(filename: str) -> str:
    """Final dotted suffix of *filename*, or "other" if there is none."""
    match = _EXTENSION.search(filename)
    return match.group(1) if match else "other"


def compute_file_type_counts(files: list[FileStat]) -> dict[str, int]:
    """Extension → number of touched files, in first-seen order."""
    counts: Counter[str] = Counter()
    for f in files:
        counts[file_extension(f.filename)] += 1
    return dict(counts)


def top_file_types(counts: dict[str, int], limit: int = 10) -> list[FileTypeCount]:
    """Most frequent extensions first; ties keep first-seen order."""
    ranked = sorted(counts.items(), key=lambda kv: kv[1], reverse=True)
    return [FileTypeCount(extension=f".{ext}", count=c) for ext, c in ranked[:limit]]


def average_commit_size(sizes: list[int]) -> int:
    if not sizes:
        return 0
    return _round_half_up(sum(sizes) / len(sizes))


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))
