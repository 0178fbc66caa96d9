from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

DEFAULT_STORY_POINTS = 5
DEFAULT_EPIC_POINTS = 10


@dataclass(frozen=True)
class FileStat:
    """A single file's change within one commit."""

    filename: str
    additions: int = 0
    deletions: int = 0


@dataclass(frozen=True)
class CommitRecord:
    """One commit as returned by the upstream fetcher."""

    sha: str
    author: str
    timestamp: datetime
    message: str
    files: list[FileStat] | None = None  # None = no per-file detail fetched


@dataclass(frozen=True)
class HourlyBucket:
    hour: str      # "0:00" .. "23:00"
    commits: int


@dataclass(frozen=True)
class WeekdayBucket:
    day: str       # "Sun" .. "Sat"
    commits: int


@dataclass(frozen=True)
class SizeBucket:
    label: str     # "0-50"|"51-100"|"101-200"|"201-500"|"500+"
    count: int


@dataclass(frozen=True)
class TimelinePoint:
    commit: str    # "#1", "#2", ...
    days: float    # gap to the next commit, 1 decimal


@dataclass(frozen=True)
class FileTypeCount:
    extension: str  # ".py", ".other"
    count: int


@dataclass(frozen=True)
class ExpertiseScore:
    name: str
    score: int


@dataclass(frozen=True)
class ExpertiseProfile:
    """Ranked specialization inferred from touched files."""

    primary: str
    ranked: list[ExpertiseScore]   # sorted by score desc
    technologies: list[str]        # at most 10, discovery order

    def score_for(self, category: str) -> ExpertiseScore | None:
        for entry in self.ranked:
            if entry.name == category:
                return entry
        return None


@dataclass(frozen=True)
class ExperienceLevel:
    level: str     # "Senior"|"Mid-Level"|"Junior"|"Beginner"
    score: int     # 0..100


@dataclass(frozen=True)
class CommitAnalysis:
    """Aggregate commit statistics for one developer."""

    total_commits: int
    on_time_count: int
    late_count: int
    on_time_percentage: float      # 1 decimal
    message_quality_score: float   # 1 decimal
    consistency_score: float       # 1 decimal, 0..100
    average_commit_size: int       # lines added + deleted per detailed commit
    total_lines_added: int
    total_lines_deleted: int
    file_types: list[FileTypeCount]  # top 10 by count desc
    expertise: ExpertiseProfile
    experience_level: ExperienceLevel
    hourly_activity: list[HourlyBucket]
    weekday_activity: list[WeekdayBucket]
    commit_size_distribution: list[SizeBucket]
    consistency_timeline: list[TimelinePoint]


@dataclass(frozen=True)
class DeveloperProfile:
    username: str
    avatar_url: str
    analysis: CommitAnalysis

    @property
    def primary_expertise(self) -> str:
        return self.analysis.expertise.primary

    @property
    def experience_tier(self) -> str:
        return self.analysis.experience_level.level


@dataclass(frozen=True)
class BatchAnalysis:
    """Result of analyzing several developers; failures map username -> reason."""

    developers: list[DeveloperProfile]
    failures: dict[str, str]


@dataclass(frozen=True)
class UserStory:
    title: str
    story_points: int | None = None
    description: str = ""
    acceptance_criteria: list[str] = field(default_factory=list)
    test_cases: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class EpicClassification:
    primary: str
    confidence: str                # "high"|"medium"|"low"
    method: str                    # "keyword"|"ai-fallback"|"default"
    alternatives: list[str] = field(default_factory=list)
    keyword_score: int = 0         # matched keyword count of the winning category


@dataclass(frozen=True)
class Epic:
    epic_id: str
    title: str
    description: str = ""
    user_stories: list[UserStory] = field(default_factory=list)
    classification: EpicClassification | None = None

    @property
    def total_story_points(self) -> int:
        """Sum of story estimates; 5 per unestimated story, 10 for an empty epic."""
        total = sum(s.story_points or DEFAULT_STORY_POINTS for s in self.user_stories)
        return total or DEFAULT_EPIC_POINTS


@dataclass(frozen=True)
class EpicClassificationResult:
    epic_id: str
    classification: EpicClassification


@dataclass(frozen=True)
class EpicSnapshot:
    epic_id: str
    title: str
    description: str
    classification: EpicClassification
    total_story_points: int
    story_count: int


@dataclass(frozen=True)
class DeveloperSnapshot:
    username: str
    expertise: str
    experience_level: str
    avatar_url: str


@dataclass(frozen=True)
class ScoreBreakdown:
    expertise_match: float     # 0..50
    experience_level: float    # 0..30
    workload_balance: float    # 0..20

    @property
    def total(self) -> float:
        return self.expertise_match + self.experience_level + self.workload_balance


@dataclass(frozen=True)
class AlternativeDeveloper:
    username: str
    score: int
    expertise: str


@dataclass(frozen=True)
class Assignment:
    epic: EpicSnapshot
    developer: DeveloperSnapshot
    score: int                 # 0..100, rounded
    confidence: str            # "high"|"medium"|"low"|"manual"
    breakdown: ScoreBreakdown
    alternatives: list[AlternativeDeveloper]  # up to two runners-up


@dataclass(frozen=True)
class AssignmentSummary:
    total_epics: int
    total_story_points: int
    avg_story_points_per_dev: float
    high_confidence: int
    medium_confidence: int
    low_confidence: int
    manual: int


@dataclass(frozen=True)
class AssignmentResult:
    assignments: list[Assignment]
    workload_distribution: dict[str, int]
    summary: AssignmentSummary


@dataclass(frozen=True)
class ReassignmentResult:
    assignments: list[Assignment]
    workload_distribution: dict[str, int]


@dataclass(frozen=True)
class AssignmentRow:
    """Flattened export record; field order is part of the export contract."""

    epic_id: str
    epic_title: str
    category: str
    story_points: int
    story_count: int
    developer: str
    expertise: str
    experience_level: str
    score: int
    confidence: str
