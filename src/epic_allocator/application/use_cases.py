import dataclasses
import logging
from datetime import datetime, timezone

from epic_allocator.domain.errors import (
    EpicNotFoundError,
    InvalidRequestError,
    NoCommitsError,
)
from epic_allocator.domain.models import (
    Assignment,
    AssignmentResult,
    AssignmentRow,
    AssignmentSummary,
    BatchAnalysis,
    CommitAnalysis,
    CommitRecord,
    DeveloperProfile,
    Epic,
    EpicClassification,
    EpicClassificationResult,
    ReassignmentResult,
)
from epic_allocator.domain.ports import AIClassifier, CommitSource
from epic_allocator.infrastructure.assignment_engine import (
    MANUAL,
    WorkloadLedger,
    assign_epic,
    default_avatar_url,
    developer_snapshot,
    unknown_developer_snapshot,
)
from epic_allocator.infrastructure.commit_metrics import (
    average_commit_size,
    compute_consistency,
    compute_consistency_timeline,
    compute_file_type_counts,
    compute_hourly_activity,
    compute_size_distribution,
    compute_weekday_activity,
    is_on_time,
    message_quality_points,
    top_file_types,
)
from epic_allocator.infrastructure.epic_classifier import classify_text
from epic_allocator.infrastructure.experience_calculator import (
    calculate_experience_level,
)
from epic_allocator.infrastructure.expertise_detector import detect_expertise
from epic_allocator.infrastructure.exporters import to_row

logger = logging.getLogger(__name__)

DEFAULT_DETAIL_LIMIT = 200


def analyze_commits(
    records: list[CommitRecord], detail_limit: int = DEFAULT_DETAIL_LIMIT,
) -> CommitAnalysis:
    """Aggregate commit records into the statistics of a developer profile.

    Timing and message statistics use every record; size and file statistics
    use the first *detail_limit* records that carry per-file detail.
    Zero or one commit yields zero/default statistics.
    """
    total = len(records)
    timestamps = [_as_aware(r.timestamp) for r in records]

    on_time = sum(1 for ts in timestamps if is_on_time(ts))
    quality_total = sum(message_quality_points(r.message) for r in records)
    on_time_pct = on_time / total * 100 if total else 0.0
    avg_quality = quality_total / total if total else 0.0
    consistency = compute_consistency(timestamps)

    detailed = [r for r in records[:detail_limit] if r.files is not None]
    files = [f for r in detailed for f in r.files]
    sizes = [sum(f.additions + f.deletions for f in r.files) for r in detailed]
    ext_counts = compute_file_type_counts(files)

    return CommitAnalysis(
        total_commits=total,
        on_time_count=on_time,
        late_count=total - on_time,
        on_time_percentage=round(on_time_pct, 1),
        message_quality_score=round(avg_quality, 1),
        consistency_score=round(consistency, 1),
        average_commit_size=average_commit_size(sizes),
        total_lines_added=sum(f.additions for f in files),
        total_lines_deleted=sum(f.deletions for f in files),
        file_types=top_file_types(ext_counts),
        expertise=detect_expertise(files, ext_counts),
        # computed from unrounded values
        experience_level=calculate_experience_level(
            total, on_time_pct, avg_quality, consistency,
        ),
        hourly_activity=compute_hourly_activity(timestamps),
        weekday_activity=compute_weekday_activity(timestamps),
        commit_size_distribution=compute_size_distribution(sizes),
        consistency_timeline=compute_consistency_timeline(timestamps),
    )


def _as_aware(ts: datetime) -> datetime:
    # naive timestamps are read as UTC; the wall-clock hour is unchanged
    return ts if ts.tzinfo is not None else ts.replace(tzinfo=timezone.utc)


def build_developer_profile(
    username: str,
    records: list[CommitRecord],
    avatar_url: str | None = None,
    detail_limit: int = DEFAULT_DETAIL_LIMIT,
) -> DeveloperProfile:
    return DeveloperProfile(
        username=username,
        avatar_url=avatar_url or default_avatar_url(username),
        analysis=analyze_commits(records, detail_limit=detail_limit),
    )


def analyze_developer(
    source: CommitSource,
    username: str,
    max_commits: int | None = None,
    detail_limit: int = DEFAULT_DETAIL_LIMIT,
) -> DeveloperProfile:
    records = source.commit_records(author=username, max_count=max_commits)
    if not records:
        raise NoCommitsError(username)
    profile = build_developer_profile(username, records, detail_limit=detail_limit)
    logger.info(
        "Analyzed %s: %d commits, %s, %s",
        username, len(records), profile.primary_expertise, profile.experience_tier,
    )
    return profile


def analyze_developers(
    source: CommitSource,
    usernames: list[str],
    max_commits: int | None = None,
    detail_limit: int = DEFAULT_DETAIL_LIMIT,
) -> BatchAnalysis:
    """Analyze each developer independently; one failure never aborts the batch."""
    if not usernames:
        raise InvalidRequestError("Developers list is required")

    profiles: list[DeveloperProfile] = []
    failures: dict[str, str] = {}
    for username in usernames:
        try:
            profiles.append(
                analyze_developer(source, username, max_commits, detail_limit)
            )
        except (NoCommitsError, ValueError, RuntimeError, OSError) as e:
            logger.warning("Skipping developer %s: %s", username, e)
            failures[username] = str(e)
    return BatchAnalysis(developers=profiles, failures=failures)


def classify_epic(epic: Epic, ai: AIClassifier | None = None) -> EpicClassification:
    return classify_text(epic.title, epic.description, ai)


def classify_epics(
    epics: list[Epic], ai: AIClassifier | None = None,
) -> list[EpicClassificationResult]:
    return [
        EpicClassificationResult(epic_id=e.epic_id, classification=classify_epic(e, ai))
        for e in epics
    ]


def auto_assign_epics(
    epics: list[Epic],
    developers: list[DeveloperProfile],
    ai: AIClassifier | None = None,
) -> AssignmentResult:
    """Assign epics in input order, booking each epic's points before the next."""
    if not epics:
        raise InvalidRequestError("No epics to assign")
    if not developers:
        raise InvalidRequestError("No developers available")

    ledger = WorkloadLedger.for_developers([d.username for d in developers])
    assignments: list[Assignment] = []
    for epic in epics:
        classification = epic.classification or classify_epic(epic, ai)
        assignments.append(assign_epic(epic, classification, developers, ledger))

    workload = ledger.as_dict()
    summary = summarize_assignments(assignments, workload, developer_count=len(developers))
    logger.info(
        "Assigned %d epics (%d points) across %d developers",
        summary.total_epics, summary.total_story_points, len(developers),
    )
    return AssignmentResult(
        assignments=assignments,
        workload_distribution=workload,
        summary=summary,
    )


def summarize_assignments(
    assignments: list[Assignment],
    workload_distribution: dict[str, int],
    developer_count: int | None = None,
) -> AssignmentSummary:
    """Totals and per-confidence counts.

    The average is taken over *developer_count* (the roster size) when given,
    else over the developers present in *workload_distribution*.
    """
    total_points = sum(workload_distribution.values())
    dev_count = developer_count if developer_count else len(workload_distribution)

    def _count(label: str) -> int:
        return sum(1 for a in assignments if a.confidence == label)

    return AssignmentSummary(
        total_epics=len(assignments),
        total_story_points=total_points,
        avg_story_points_per_dev=total_points / dev_count if dev_count else 0.0,
        high_confidence=_count("high"),
        medium_confidence=_count("medium"),
        low_confidence=_count("low"),
        manual=_count(MANUAL),
    )


def reassign_epic(
    assignments: list[Assignment],
    epic_id: str,
    new_developer_id: str,
    workload_distribution: dict[str, int],
    developers: list[DeveloperProfile] | None = None,
) -> ReassignmentResult:
    """Move an epic to another developer, updating both structures in place.

    The epic's points leave the old developer's workload entry and join the
    new developer's (created if absent); the assignment becomes "manual".
    """
    if not new_developer_id:
        raise InvalidRequestError("New developer is required")

    index = next(
        (i for i, a in enumerate(assignments) if a.epic.epic_id == epic_id), None,
    )
    if index is None:
        raise EpicNotFoundError(epic_id)

    current = assignments[index]
    WorkloadLedger(workload_distribution).move(
        current.developer.username, new_developer_id,
        current.epic.total_story_points,
    )

    profile = next((d for d in developers or [] if d.username == new_developer_id), None)
    snapshot = (
        developer_snapshot(profile) if profile
        else unknown_developer_snapshot(new_developer_id)
    )
    assignments[index] = dataclasses.replace(
        current, developer=snapshot, confidence=MANUAL,
    )
    logger.info(
        "Reassigned epic %s from %s to %s (%d pts)",
        epic_id, current.developer.username, new_developer_id,
        current.epic.total_story_points,
    )
    return ReassignmentResult(
        assignments=assignments, workload_distribution=workload_distribution,
    )


def export_rows(assignments: list[Assignment]) -> list[AssignmentRow]:
    return [to_row(a) for a in assignments]
