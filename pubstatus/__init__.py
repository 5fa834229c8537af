"""
pubstatus - Publication status of a fleet of tracked projects.

For every tracked project pubstatus combines branch freshness and
version tags from GitHub with the versions listed in the project's
published package-list.json, and reports which versions are tagged but
unpublished or published without a tag.

Quick Start:
    import pubstatus

    projects = pubstatus.load_projects("igs.yaml")
    fleet = pubstatus.FleetService()
    for record in fleet.aggregate(projects):
        print(record.name, [v.version for v in record.unpublished_versions])

Domain Objects:
    TrackedProject - One entry of the project list
    ProjectRecord - Consolidated status of one project (possibly degraded)
    ClassifiedBranch - Branch with staleness information
    ReconciledVersion - Version with tag and publication presence

Services:
    ProjectService - One project, failures contained
    FleetService - All projects, concurrently, in input order
"""

__version__ = "0.3.0"

from .domain import (
    TrackedProject,
    ProjectRecord,
    ProjectOutcome,
    BranchRef,
    ClassifiedBranch,
    PublishedVersionEntry,
    ReconciledVersion,
    classify_branches,
    reconcile_versions,
)

from .services import ProjectService, FleetService

from .errors import (
    PubStatusError,
    RepositoryLookupError,
    ManifestFetchError,
    ConfigLoadError,
    UnknownProxyHost,
)

from .config import load_config, load_projects

__all__ = [
    "__version__",
    # Domain objects
    "TrackedProject",
    "ProjectRecord",
    "ProjectOutcome",
    "BranchRef",
    "ClassifiedBranch",
    "PublishedVersionEntry",
    "ReconciledVersion",
    "classify_branches",
    "reconcile_versions",
    # Services
    "ProjectService",
    "FleetService",
    # Errors
    "PubStatusError",
    "RepositoryLookupError",
    "ManifestFetchError",
    "ConfigLoadError",
    "UnknownProxyHost",
    # Configuration
    "load_config",
    "load_projects",
]
