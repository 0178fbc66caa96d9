"""Seniority tier from aggregate commit metrics.

Four step functions, summed to a 0..100 composite:

    volume          max 40
    work pattern    max 15
    message quality max 25
    consistency     max 20 (gated by commit volume)
"""

from __future__ import annotations

from epic_allocator.domain.models import ExperienceLevel

SENIOR = "Senior"
MID_LEVEL = "Mid-Level"
JUNIOR = "Junior"
BEGINNER = "Beginner"

# (minimum composite score, tier), checked in order
_TIERS: list[tuple[int, str]] = [
    (80, SENIOR),
    (60, MID_LEVEL),
    (40, JUNIOR),
]


def volume_points(total_commits: int) -> int:
    if total_commits > 200:
        return 40
    if total_commits > 150:
        return 35
    if total_commits > 100:
        return 30
    if total_commits > 50:
        return 25
    return 10


def work_pattern_points(on_time_percentage: float) -> int:
    if on_time_percentage >= 60:
        return 15
    if on_time_percentage >= 50:
        return 10
    if on_time_percentage >= 30:
        return 5
    return 2


def message_quality_points(message_quality: float) -> int:
    if message_quality >= 40:
        return 25
    if message_quality >= 30:
        return 20
    if message_quality >= 20:
        return 15
    return 5


def consistency_points(consistency: float, total_commits: int) -> int:
    if consistency >= 70 and total_commits > 100:
        return 20
    if consistency >= 60 and total_commits > 50:
        return 15
    if consistency >= 40 and total_commits > 30:
        return 10
    return 5


def tier_for_score(score: int) -> str:
    for threshold, tier in _TIERS:
        if score >= threshold:
            return tier
    return BEGINNER


def calculate_experience_level(
    total_commits: int,
    on_time_percentage: float,
    message_quality: float,
    consistency: float,
) -> ExperienceLevel:
    score = (
        volume_points(total_commits)
        + work_pattern_points(on_time_percentage)
        + message_quality_points(message_quality)
        + consistency_points(consistency, total_commits)
    )
    return ExperienceLevel(level=tier_for_score(score), score=score)
