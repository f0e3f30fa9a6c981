"""Parsers for raw git output."""

import re

from gitdir.models import DETACHED_HEAD, DiffCommitCount, ModifiedCount, ShortStatusInfo

# ex. "4 files changed, 15 insertions(+), 5 deletions(-)"
# ex. "1 file changed, 1 insertion(+)"
_FILES_RE = re.compile(r"(\d+) files?")
_INSERTIONS_RE = re.compile(r"(\d+) insertions?")
_DELETIONS_RE = re.compile(r"(\d+) deletions?")
_LEFT_RIGHT_RE = re.compile(r"(\d+)\s+(\d+)")


def _first_int(pattern: re.Pattern[str], text: str) -> int:
    match = pattern.search(text)
    return int(match.group(1)) if match else 0


def parse_branch(output: str) -> str:
    """Parse `git branch --show-current`; empty output means detached HEAD."""
    return output.strip() or DETACHED_HEAD


def parse_short_status(output: str) -> ShortStatusInfo:
    """Parse `git status -s` output."""
    return ShortStatusInfo(status=output.strip("\r\n"))


def parse_ahead_behind(output: str) -> DiffCommitCount:
    """Parse `git rev-list --count --left-right A...B` output.

    A response without two counts is reported as absent rather than zero.
    """
    match = _LEFT_RIGHT_RE.search(output)
    if not match:
        return DiffCommitCount()
    return DiffCommitCount(ahead=int(match.group(1)), behind=int(match.group(2)))


def parse_shortstat(output: str) -> ModifiedCount:
    """Parse the one-line summary of `git diff --shortstat`."""
    lines = [line for line in output.splitlines() if line.strip()]
    if not lines:
        return ModifiedCount()
    stats = lines[0]
    return ModifiedCount(
        files=_first_int(_FILES_RE, stats),
        insertions=_first_int(_INSERTIONS_RE, stats),
        deletions=_first_int(_DELETIONS_RE, stats),
    )


def parse_is_inside_work_tree(output: str) -> bool:
    return output.strip() == "true"


def parse_remote_default_branch(output: str) -> str:
    """Parse `git rev-parse --abbrev-ref origin/HEAD` into a bare branch name."""
    return output.strip().removeprefix("origin/")
