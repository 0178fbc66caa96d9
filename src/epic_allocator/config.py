"""Environment-driven settings."""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from epic_allocator.domain.ports import AIClassifier


@dataclass
class Settings:
    ai_url: str | None = None
    ai_timeout: float = 10.0
    db_path: str | None = None        # None → ~/.epic-allocator/runs.db
    detail_limit: int = 200
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls) -> Settings:
        load_dotenv()
        return cls(
            ai_url=os.getenv("EPIC_ALLOCATOR_AI_URL") or None,
            ai_timeout=float(os.getenv("EPIC_ALLOCATOR_AI_TIMEOUT", "10.0")),
            db_path=os.getenv("EPIC_ALLOCATOR_DB") or None,
            detail_limit=int(os.getenv("EPIC_ALLOCATOR_DETAIL_LIMIT", "200")),
            log_level=os.getenv("EPIC_ALLOCATOR_LOG_LEVEL", "WARNING").upper(),
        )

    def ai_classifier(self) -> AIClassifier:
        from epic_allocator.infrastructure.ai_classifier import (
            HttpAIClassifier,
            NullAIClassifier,
        )

        if not self.ai_url:
            return NullAIClassifier()
        return HttpAIClassifier(self.ai_url, timeout=self.ai_timeout)


def close_classifier(classifier: AIClassifier) -> None:
    """Release the classifier's HTTP client, if it holds one."""
    close = getattr(classifier, "close", None)
    if close is not None:
        close()
