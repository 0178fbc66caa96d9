from __future__ import annotations

import csv
import dataclasses
import io
import json
from pathlib import Path

from epic_allocator.domain.models import Assignment, AssignmentRow

CSV_HEADERS = [
    "Epic ID", "Epic Title", "Category", "Story Points", "Story Count",
    "Developer", "Expertise", "Experience", "Score", "Confidence",
]

ROW_FIELDS = [f.name for f in dataclasses.fields(AssignmentRow)]


def to_row(assignment: Assignment) -> AssignmentRow:
    return AssignmentRow(
        epic_id=assignment.epic.epic_id,
        epic_title=assignment.epic.title,
        category=assignment.epic.classification.primary,
        story_points=assignment.epic.total_story_points,
        story_count=assignment.epic.story_count,
        developer=assignment.developer.username,
        expertise=assignment.developer.expertise,
        experience_level=assignment.developer.experience_level,
        score=assignment.score,
        confidence=assignment.confidence,
    )


def rows_to_csv(rows: list[AssignmentRow]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for row in rows:
        writer.writerow(dataclasses.astuple(row))
    return buf.getvalue()


def rows_to_json(rows: list[AssignmentRow]) -> str:
    return json.dumps([dataclasses.asdict(r) for r in rows], indent=2)


def write_csv(rows: list[AssignmentRow], path: str | Path) -> None:
    Path(path).write_text(rows_to_csv(rows), encoding="utf-8")
