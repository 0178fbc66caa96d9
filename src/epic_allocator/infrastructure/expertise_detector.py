"""Specialization profile from touched file paths.

Scoring per file, per category:
- +2 if the file's extension is one of the category's extensions
- +5 for each config-file marker the lower-cased path contains or ends with
- +3 for each directory marker the lower-cased path contains
The extension histogram then adds each extension's count to every category
listing that extension, so categories with many small commits are not
penalized.
"""

from __future__ import annotations

import re

from epic_allocator.domain.models import ExpertiseProfile, ExpertiseScore, FileStat
from epic_allocator.domain.taxonomy import GENERAL_DEVELOPMENT, Category

EXTENSION_POINTS = 2
CONFIG_FILE_POINTS = 5
PATH_PATTERN_POINTS = 3

FULL_STACK_RATIO = 0.5       # share of the top score that counts as "significant"
FULL_STACK_MIN_AREAS = 3
MAX_RANKED = 4
MAX_TECHNOLOGIES = 10

_SAFE_EXTENSION = re.compile(r"\.([a-zA-Z0-9]+)$")


def _safe_extension(filename: str) -> str:
    match = _SAFE_EXTENSION.search(filename)
    return match.group(1).lower() if match else ""


def score_categories(
    files: list[FileStat],
    extension_counts: dict[str, int] | None = None,
) -> tuple[dict[Category, int], list[str]]:
    """Raw per-category scores plus detected technology tokens (discovery order)."""
    scores: dict[Category, int] = {c: 0 for c in Category}
    technologies: dict[str, None] = {}

    for f in files:
        ext = _safe_extension(f.filename)
        lower_name = f.filename.lower()
        for category in Category:
            if ext and ext in category.extensions:
                scores[category] += EXTENSION_POINTS
                technologies.setdefault(ext.upper())
            for marker in category.config_files:
                lower_marker = marker.lower()
                if lower_marker in lower_name or lower_name.endswith(lower_marker):
                    scores[category] += CONFIG_FILE_POINTS
                    technologies.setdefault(marker)
            for pattern in category.path_patterns:
                if pattern.lower() in lower_name:
                    scores[category] += PATH_PATTERN_POINTS

    for raw_ext, count in (extension_counts or {}).items():
        ext = raw_ext.lstrip(".").lower()
        for category in Category:
            if ext in category.extensions:
                scores[category] += count

    return scores, list(technologies)


def detect_expertise(
    files: list[FileStat],
    extension_counts: dict[str, int] | None = None,
) -> ExpertiseProfile:
    scores, technologies = score_categories(files, extension_counts)
    technologies = technologies[:MAX_TECHNOLOGIES]

    # sorted() is stable, so equal scores keep taxonomy order
    ranked = sorted(
        ((c, s) for c, s in scores.items() if s > 0),
        key=lambda cs: cs[1],
        reverse=True,
    )

    if not ranked:
        return ExpertiseProfile(
            primary=GENERAL_DEVELOPMENT,
            ranked=[ExpertiseScore(name=GENERAL_DEVELOPMENT, score=0)],
            technologies=technologies,
        )

    top_score = ranked[0][1]
    significant = [(c, s) for c, s in ranked if s >= top_score * FULL_STACK_RATIO]

    if len(significant) >= FULL_STACK_MIN_AREAS:
        return ExpertiseProfile(
            primary=Category.FULL_STACK.value,
            ranked=[ExpertiseScore(name=c.value, score=s) for c, s in significant],
            technologies=technologies,
        )

    return ExpertiseProfile(
        primary=ranked[0][0].value,
        ranked=[ExpertiseScore(name=c.value, score=s) for c, s in ranked[:MAX_RANKED]],
        technologies=technologies,
    )
