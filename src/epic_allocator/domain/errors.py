from __future__ import annotations


class AllocatorError(Exception):
    """Base class for errors reported to callers of the use cases."""


class InvalidRequestError(AllocatorError, ValueError):
    """A required collection is missing or empty."""


class EpicNotFoundError(AllocatorError, LookupError):
    """Reassignment target is not among the current assignments."""

    def __init__(self, epic_id: str) -> None:
        super().__init__(f"Epic {epic_id} not found in assignments")
        self.epic_id = epic_id


class NoCommitsError(AllocatorError):
    """The commit source returned nothing for a developer."""

    def __init__(self, username: str) -> None:
        super().__init__(f"No commits found for {username}")
        self.username = username
