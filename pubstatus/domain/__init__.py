"""
Domain layer for pubstatus.

Contains pure domain objects and functions with no I/O or side effects:
- TrackedProject / ProjectRecord: input and output of the aggregation
- BranchRef / ClassifiedBranch: branch freshness
- PublishedVersionEntry / ReconciledVersion: tag vs. manifest versions

These objects are immutable and provide to_dict() for JSONL output.
"""

from .project import TrackedProject, ProjectRecord, ProjectOutcome
from .branch import BranchRef, ClassifiedBranch, classify_branches
from .version import (
    PublishedVersionEntry,
    ReconciledVersion,
    normalize_version,
    is_sentinel_version,
    tag_versions_from_names,
    reconcile_versions,
)

__all__ = [
    'TrackedProject',
    'ProjectRecord',
    'ProjectOutcome',
    'BranchRef',
    'ClassifiedBranch',
    'classify_branches',
    'PublishedVersionEntry',
    'ReconciledVersion',
    'normalize_version',
    'is_sentinel_version',
    'tag_versions_from_names',
    'reconcile_versions',
]
