from __future__ import annotations

import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.responses import Response

from epic_allocator.application.use_cases import (
    auto_assign_epics,
    build_developer_profile,
    classify_epics,
    reassign_epic,
    summarize_assignments,
)
from epic_allocator.config import Settings, close_classifier
from epic_allocator.domain.errors import EpicNotFoundError, InvalidRequestError
from epic_allocator.domain.ports import AIClassifier
from epic_allocator.infrastructure.assignment_store import AssignmentStore
from epic_allocator.infrastructure.exporters import rows_to_csv
from epic_allocator.web.models import (
    AnalyzeCommitsRequest,
    AnalyzeCommitsResponse,
    AutoAssignRequest,
    AutoAssignResponse,
    ClassifyEpicsRequest,
    ClassifyEpicsResponse,
    ReassignRequest,
    ReassignResponse,
    RunAssignments,
    RunSummary,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = Settings.from_env()
    db_path = getattr(app.state, "db_path", None) or settings.db_path
    app.state.store = AssignmentStore(db_path=db_path)
    supplied = getattr(app.state, "ai", None)
    app.state.classifier = supplied or settings.ai_classifier()
    yield
    app.state.store.close()
    if supplied is None:
        close_classifier(app.state.classifier)


app = FastAPI(title="epic-allocator", lifespan=lifespan)


def _store() -> AssignmentStore:
    return app.state.store


def _classifier() -> AIClassifier:
    return app.state.classifier


@app.post("/api/analyze-commits", response_model=AnalyzeCommitsResponse)
def analyze_commits_endpoint(request: AnalyzeCommitsRequest):
    profile = build_developer_profile(
        request.username, request.commits,
        avatar_url=request.avatar_url, detail_limit=request.detail_limit,
    )
    return AnalyzeCommitsResponse(
        username=profile.username,
        avatar_url=profile.avatar_url,
        analysis=profile.analysis,
    )


@app.post("/api/classify-epics", response_model=ClassifyEpicsResponse)
def classify_epics_endpoint(request: ClassifyEpicsRequest):
    return ClassifyEpicsResponse(
        classifications=classify_epics(request.epics, ai=_classifier()),
    )


@app.post("/api/auto-assign", response_model=AutoAssignResponse)
def auto_assign_endpoint(request: AutoAssignRequest):
    try:
        result = auto_assign_epics(request.epics, request.developers, ai=_classifier())
    except InvalidRequestError as e:
        raise HTTPException(status_code=400, detail=str(e))

    run_id = None
    if request.save:
        run_id = str(uuid.uuid4())
        _store().save_run(run_id, result)

    return AutoAssignResponse(
        run_id=run_id,
        assignments=result.assignments,
        workload_distribution=result.workload_distribution,
        summary=result.summary,
    )


@app.post("/api/reassign", response_model=ReassignResponse)
def reassign_endpoint(request: ReassignRequest):
    try:
        result = reassign_epic(
            request.assignments, request.epic_id, request.new_developer,
            request.workload_distribution, developers=request.developers,
        )
    except InvalidRequestError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except EpicNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return ReassignResponse(
        assignments=result.assignments,
        workload_distribution=result.workload_distribution,
        summary=summarize_assignments(
            result.assignments, result.workload_distribution,
            developer_count=len(request.developers),
        ),
    )


@app.get("/api/runs", response_model=list[RunSummary])
def list_runs():
    return [RunSummary(**r) for r in _store().list_runs()]


@app.get("/api/runs/{run_id}/assignments", response_model=RunAssignments)
def get_run_assignments(run_id: str):
    _assert_run_exists(run_id)
    return RunAssignments(
        run_id=run_id,
        rows=_store().get_rows(run_id),
        workload_distribution=_store().get_workloads(run_id),
    )


@app.get("/api/runs/{run_id}/export.csv")
def export_run_csv(run_id: str):
    _assert_run_exists(run_id)
    return Response(
        content=rows_to_csv(_store().get_rows(run_id)),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="epic-assignments-{run_id}.csv"'},
    )


def _assert_run_exists(run_id: str) -> None:
    if _store().get_run(run_id) is None:
        raise HTTPException(status_code=404, detail="Run not found")
