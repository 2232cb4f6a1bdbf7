"""Project context collaborator interface."""

from typing import Protocol


class ProjectContext(Protocol):
    """Cache of project listings/embeddings owned outside the core.

    The core only signals that cached data for a working tree is stale.
    """

    def invalidate(self, cwd: str) -> None: ...


class NullProjectContext:
    """Project context that ignores invalidation."""

    def invalidate(self, cwd: str) -> None:
        return None


class RecordingProjectContext:
    """Project context that remembers every invalidated working tree."""

    def __init__(self) -> None:
        self.invalidated: list[str] = []

    def invalidate(self, cwd: str) -> None:
        self.invalidated.append(cwd)
