"""Data models for gitdir."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Generic, TypeVar

T = TypeVar("T")

TOO_MANY_CHANGES_LIMIT = 1000
DETACHED_HEAD = "Detached Head"


@dataclass(frozen=True)
class Ok(Generic[T]):
    """A query that completed with a value."""

    value: T


class Unavailable:
    """A query that could not produce data."""

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Unavailable)

    def __hash__(self) -> int:
        return hash(Unavailable)

    def __repr__(self) -> str:
        return "UNAVAILABLE"


UNAVAILABLE = Unavailable()

Outcome = Ok[T] | Unavailable


@dataclass(frozen=True)
class ShortStatusInfo:
    """Changed-file lines from a short status query."""

    status: str
    too_many_changes: bool = False


@dataclass(frozen=True)
class ModifiedCount:
    """Statistics from a diff summary."""

    files: int = 0
    insertions: int = 0
    deletions: int = 0


@dataclass(frozen=True)
class DiffCommitCount:
    """Commit counts ahead/behind the upstream.

    Both counts are None when the branch has no upstream configured.
    """

    ahead: int | None = None
    behind: int | None = None

    @property
    def has_upstream(self) -> bool:
        return self.ahead is not None or self.behind is not None


@dataclass(frozen=True)
class GitStatus:
    """Status summary for a single working tree."""

    name: str
    path: Path
    status: str
    branch: str
    diff_commit_count: DiffCommitCount
    modified_count: ModifiedCount
    is_dirty: bool
    has_unsaved_changes: bool
    too_many_changes: bool
    has_unmerged_commits: bool
    has_unsynced_commits: bool

    @classmethod
    def build(
        cls,
        path: Path,
        branch: str,
        status_info: ShortStatusInfo,
        diff_commit_count: DiffCommitCount,
        modified_count: ModifiedCount,
    ) -> "GitStatus":
        """Assemble a record and derive its health flags."""
        ahead = diff_commit_count.ahead
        behind = diff_commit_count.behind
        is_dirty = modified_count.files > 0
        has_unmerged_commits = ahead is not None and ahead > 0
        has_unsynced_commits = has_unmerged_commits or (behind is not None and behind > 0)
        return cls(
            name=path.name,
            path=path,
            status=status_info.status,
            branch=branch,
            diff_commit_count=diff_commit_count,
            modified_count=modified_count,
            is_dirty=is_dirty,
            has_unsaved_changes=is_dirty or has_unmerged_commits,
            too_many_changes=(
                status_info.too_many_changes or len(status_info.status) > TOO_MANY_CHANGES_LIMIT
            ),
            has_unmerged_commits=has_unmerged_commits,
            has_unsynced_commits=has_unsynced_commits,
        )

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-ready mapping of this record."""
        return {
            "name": self.name,
            "path": str(self.path),
            "status": self.status,
            "branch": self.branch,
            "diffCommitCount": {
                "ahead": self.diff_commit_count.ahead,
                "behind": self.diff_commit_count.behind,
            },
            "modifiedCount": {
                "files": self.modified_count.files,
                "insertions": self.modified_count.insertions,
                "deletions": self.modified_count.deletions,
            },
            "isDirty": self.is_dirty,
            "hasUnsavedChanges": self.has_unsaved_changes,
            "tooManyChanges": self.too_many_changes,
            "hasUnmergedCommits": self.has_unmerged_commits,
            "hasUnsyncedCommits": self.has_unsynced_commits,
        }
