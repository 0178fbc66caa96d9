from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from epic_allocator.domain.models import (
    Assignment,
    AssignmentRow,
    AssignmentSummary,
    CommitAnalysis,
    CommitRecord,
    DeveloperProfile,
    Epic,
    EpicClassificationResult,
)


class AnalyzeCommitsRequest(BaseModel):
    username: str
    avatar_url: str | None = None
    commits: list[CommitRecord]
    detail_limit: int = Field(default=200, ge=0)


class AnalyzeCommitsResponse(BaseModel):
    username: str
    avatar_url: str
    analysis: CommitAnalysis


class ClassifyEpicsRequest(BaseModel):
    epics: list[Epic]


class ClassifyEpicsResponse(BaseModel):
    classifications: list[EpicClassificationResult]


class AutoAssignRequest(BaseModel):
    epics: list[Epic]
    developers: list[DeveloperProfile]
    save: bool = False


class AutoAssignResponse(BaseModel):
    run_id: str | None = None
    assignments: list[Assignment]
    workload_distribution: dict[str, int]
    summary: AssignmentSummary


class ReassignRequest(BaseModel):
    assignments: list[Assignment]
    epic_id: str
    new_developer: str
    workload_distribution: dict[str, int]
    developers: list[DeveloperProfile] = []


class ReassignResponse(BaseModel):
    assignments: list[Assignment]
    workload_distribution: dict[str, int]
    summary: AssignmentSummary


class RunSummary(BaseModel):
    run_id: str
    created_at: datetime
    total_epics: int
    total_story_points: int
    avg_story_points_per_dev: float
    high_confidence: int
    medium_confidence: int
    low_confidence: int
    manual: int
    developer_count: int


class RunAssignments(BaseModel):
    run_id: str
    rows: list[AssignmentRow]
    workload_distribution: dict[str, int]
