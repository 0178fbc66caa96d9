"""Developer and epic compatibility scoring, plus workload bookkeeping.

Score = expertise match (max 50) + experience level (max 30)
      + workload balance (max 20, inverse of current load vs. team average).

Epics must be assigned one at a time: each assignment adds its points to the
ledger before the next epic is scored, so workload balance always reflects the
distribution as of that point in the sequence.
"""

from __future__ import annotations

import logging
import math

from epic_allocator.domain.models import (
    AlternativeDeveloper,
    Assignment,
    DeveloperProfile,
    DeveloperSnapshot,
    Epic,
    EpicClassification,
    EpicSnapshot,
    ScoreBreakdown,
)
from epic_allocator.domain.taxonomy import Category

logger = logging.getLogger(__name__)

MAX_EXPERTISE_POINTS = 50.0
FULL_STACK_POINTS = 25.0
MAX_WORKLOAD_POINTS = 20.0
WORKLOAD_DIVISOR = 5.0

_EXPERIENCE_POINTS: dict[str, int] = {
    "Senior": 30,
    "Mid-Level": 20,
    "Junior": 10,
    "Beginner": 5,
}
_DEFAULT_EXPERIENCE_POINTS = 5

# (minimum score, label), checked in order
_CONFIDENCE_LEVELS: list[tuple[float, str]] = [
    (70, "high"),
    (50, "medium"),
]

MANUAL = "manual"
UNKNOWN = "Unknown"
MAX_ALTERNATIVES = 2


class WorkloadLedger:
    """Running story-point totals per developer.

    Wraps the given dict without copying, so moves are visible to its owner.
    """

    def __init__(self, points: dict[str, int] | None = None) -> None:
        self._points = points if points is not None else {}

    @classmethod
    def for_developers(cls, usernames: list[str]) -> WorkloadLedger:
        return cls({u: 0 for u in usernames})

    def load(self, username: str) -> int:
        return self._points.get(username, 0)

    def average(self) -> float:
        if not self._points:
            return 0.0
        return sum(self._points.values()) / len(self._points)

    def total(self) -> int:
        return sum(self._points.values())

    def add(self, username: str, points: int) -> None:
        self._points[username] = self._points.get(username, 0) + points

    def move(self, from_username: str, to_username: str, points: int) -> None:
        """Shift *points* between developers; the grand total is unchanged."""
        self._points[from_username] = self._points.get(from_username, 0) - points
        self._points[to_username] = self._points.get(to_username, 0) + points

    def as_dict(self) -> dict[str, int]:
        return self._points


def expertise_match_points(developer: DeveloperProfile, category: str) -> float:
    entry = developer.analysis.expertise.score_for(category)
    if entry is not None:
        return min(MAX_EXPERTISE_POINTS, entry.score / 2)
    if developer.primary_expertise == Category.FULL_STACK.value:
        return FULL_STACK_POINTS
    return 0.0


def experience_points(tier: str) -> int:
    return _EXPERIENCE_POINTS.get(tier, _DEFAULT_EXPERIENCE_POINTS)


def workload_balance_points(average_load: float, current_load: float) -> float:
    """Developers below the team average earn up to 20 points."""
    raw = (average_load - current_load) / WORKLOAD_DIVISOR
    return min(MAX_WORKLOAD_POINTS, max(0.0, raw))


def score_developer(
    developer: DeveloperProfile, category: str, ledger: WorkloadLedger,
) -> ScoreBreakdown:
    return ScoreBreakdown(
        expertise_match=expertise_match_points(developer, category),
        experience_level=float(experience_points(developer.experience_tier)),
        workload_balance=workload_balance_points(
            ledger.average(), ledger.load(developer.username),
        ),
    )


def rank_developers(
    developers: list[DeveloperProfile], category: str, ledger: WorkloadLedger,
) -> list[tuple[DeveloperProfile, ScoreBreakdown]]:
    """Developers by descending total score; ties keep input order."""
    scored = [(d, score_developer(d, category, ledger)) for d in developers]
    return sorted(scored, key=lambda pair: pair[1].total, reverse=True)


def confidence_for(score: float) -> str:
    for threshold, label in _CONFIDENCE_LEVELS:
        if score >= threshold:
            return label
    return "low"


def developer_snapshot(developer: DeveloperProfile) -> DeveloperSnapshot:
    return DeveloperSnapshot(
        username=developer.username,
        expertise=developer.primary_expertise,
        experience_level=developer.experience_tier,
        avatar_url=developer.avatar_url,
    )


def epic_snapshot(epic: Epic, classification: EpicClassification) -> EpicSnapshot:
    return EpicSnapshot(
        epic_id=epic.epic_id,
        title=epic.title,
        description=epic.description,
        classification=classification,
        total_story_points=epic.total_story_points,
        story_count=len(epic.user_stories),
    )


def assign_epic(
    epic: Epic,
    classification: EpicClassification,
    developers: list[DeveloperProfile],
    ledger: WorkloadLedger,
) -> Assignment:
    """Give *epic* to the best-scoring developer and book its points."""
    ranked = rank_developers(developers, classification.primary, ledger)
    best, breakdown = ranked[0]
    total = breakdown.total
    snapshot = epic_snapshot(epic, classification)

    assignment = Assignment(
        epic=snapshot,
        developer=developer_snapshot(best),
        score=_round_half_up(total),
        confidence=confidence_for(total),
        breakdown=breakdown,
        alternatives=[
            AlternativeDeveloper(
                username=d.username,
                score=_round_half_up(b.total),
                expertise=d.primary_expertise,
            )
            for d, b in ranked[1:1 + MAX_ALTERNATIVES]
        ],
    )
    ledger.add(best.username, snapshot.total_story_points)
    logger.debug(
        "Epic %s (%s, %d pts) -> %s score=%.1f",
        epic.epic_id, classification.primary, snapshot.total_story_points,
        best.username, total,
    )
    return assignment


def unknown_developer_snapshot(username: str) -> DeveloperSnapshot:
    return DeveloperSnapshot(
        username=username,
        expertise=UNKNOWN,
        experience_level=UNKNOWN,
        avatar_url=default_avatar_url(username),
    )


def default_avatar_url(username: str) -> str:
    return f"https://github.com/{username}.png"


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))
