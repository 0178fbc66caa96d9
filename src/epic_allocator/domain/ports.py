from __future__ import annotations

from typing import Protocol

from epic_allocator.domain.models import CommitRecord


class CommitSource(Protocol):
    """Upstream fetcher of a developer's commits (already paginated, finite)."""

    def commit_records(
        self, author: str | None = None, max_count: int | None = None
    ) -> list[CommitRecord]: ...


class AIClassifier(Protocol):
    """Optional fallback classifier for ambiguous epic text.

    Returns a category name, or None when it has no usable answer.
    """

    def classify(self, title: str, description: str) -> str | None: ...
