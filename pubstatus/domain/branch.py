"""
Branch domain objects for pubstatus.

BranchRef is the raw branch data fetched from GitHub. ClassifiedBranch
adds freshness information relative to a fixed point in time.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import List, Dict, Any, Iterable

# Branch holding the rendered site; never reported.
PAGES_BRANCH = 'gh-pages'

# Non-default branches older than this many days are stale.
STALE_AFTER_DAYS = 90

_MS_PER_DAY = 86_400_000


@dataclass(frozen=True)
class BranchRef:
    """A branch and the date of its latest commit."""
    name: str
    committed_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'committed_at': self.committed_at.isoformat(),
        }


@dataclass(frozen=True)
class ClassifiedBranch:
    """A branch with freshness classification."""
    name: str
    committed_at: datetime
    days_since_commit: int
    is_default: bool
    is_stale: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'committed_at': self.committed_at.isoformat(),
            'days_since_commit': self.days_since_commit,
            'is_default': self.is_default,
            'is_stale': self.is_stale,
        }


def days_between(earlier: datetime, later: datetime) -> int:
    """Whole days elapsed from earlier to later, never negative."""
    elapsed_ms = (later - earlier) // timedelta(milliseconds=1)
    return max(0, elapsed_ms // _MS_PER_DAY)


def classify_branches(
    branches: Iterable[BranchRef],
    default_branch: str,
    now: datetime,
    stale_after_days: int = STALE_AFTER_DAYS
) -> List[ClassifiedBranch]:
    """
    Classify branches by freshness.

    Args:
        branches: Raw branches (gh-pages is dropped if present)
        default_branch: Name of the repository's default branch
        now: Reference time; must be comparable with committed_at
        stale_after_days: Threshold in whole days

    Returns:
        ClassifiedBranch list in input order
    """
    classified = []
    for branch in branches:
        if branch.name == PAGES_BRANCH:
            continue

        days = days_between(branch.committed_at, now)
        is_default = branch.name == default_branch
        classified.append(ClassifiedBranch(
            name=branch.name,
            committed_at=branch.committed_at,
            days_since_commit=days,
            is_default=is_default,
            is_stale=not is_default and days > stale_after_days,
        ))
    return classified
