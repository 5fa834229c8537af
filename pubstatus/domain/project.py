"""
Project domain objects for pubstatus.

TrackedProject is one entry of the project list. ProjectRecord is the
consolidated per-project view produced by the aggregation services.
Both are immutable; a degraded ProjectRecord keeps only the identity of
a project whose data sources could not be reached.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Dict, Any, Tuple, List

from .branch import ClassifiedBranch
from .version import PublishedVersionEntry, ReconciledVersion


@dataclass(frozen=True)
class TrackedProject:
    """
    A project whose publication health is tracked.

    Attributes:
        name: Display name
        repo: GitHub repository as "owner/repo"
        published: URL of the published site, if any
    """
    name: str
    repo: str
    published: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TrackedProject':
        """
        Create from a project list entry ({name, repo, published?}).

        Raises:
            ValueError: if 'name' or 'repo' is missing
        """
        name = data.get('name')
        repo = data.get('repo')
        if not name or not repo:
            raise ValueError(f"Project entry needs 'name' and 'repo': {data!r}")

        published = data.get('published') or None
        return cls(name=str(name), repo=str(repo).strip(), published=published)

    @property
    def owner(self) -> str:
        return self.repo.split('/', 1)[0]

    @property
    def repo_name(self) -> str:
        parts = self.repo.split('/', 1)
        return parts[1] if len(parts) > 1 else ''

    @property
    def ci_build_url(self) -> str:
        """Preview site built by CI on GitHub Pages."""
        return f"https://{self.owner}.github.io/{self.repo_name}/"

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'repo': self.repo,
            'published': self.published,
        }


@dataclass(frozen=True)
class ProjectRecord:
    """
    Consolidated publication status of one tracked project.

    Create healthy records through ProjectService; create degraded
    records with ProjectRecord.degraded().
    """
    name: str
    repo: str
    url: str = ""
    default_branch: str = ""
    last_default_commit_at: Optional[datetime] = None
    branches: Tuple[ClassifiedBranch, ...] = ()
    versions: Tuple[ReconciledVersion, ...] = ()
    published_versions: Tuple[PublishedVersionEntry, ...] = ()
    ci_build_url: str = ""
    default_branch_stale: bool = False
    error: Optional[str] = None

    @classmethod
    def degraded(cls, project: TrackedProject, error: Optional[str] = None) -> 'ProjectRecord':
        """Record carrying only the identity of an unavailable project."""
        return cls(name=project.name, repo=project.repo, error=error or "unavailable")

    @property
    def is_degraded(self) -> bool:
        return self.error is not None

    @property
    def stale_branches(self) -> List[ClassifiedBranch]:
        return [b for b in self.branches if b.is_stale]

    @property
    def unpublished_versions(self) -> List[ReconciledVersion]:
        """Tagged versions missing from the published manifest."""
        return [v for v in self.versions if not v.is_published]

    @property
    def untagged_versions(self) -> List[ReconciledVersion]:
        """Published versions with no matching repository tag."""
        return [v for v in self.versions if not v.has_tag]

    def visible_branches(self, show_stale: bool = False) -> List[ClassifiedBranch]:
        """Branches to display; stale ones are hidden unless requested."""
        if show_stale:
            return list(self.branches)
        return [b for b in self.branches if b.is_default or not b.is_stale]

    def visible_versions(self, show_unpublished: bool = True) -> List[ReconciledVersion]:
        """Versions to display; unpublished ones can be hidden."""
        if show_unpublished:
            return list(self.versions)
        return [v for v in self.versions if v.is_published]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result = {
            'name': self.name,
            'repo': self.repo,
            'url': self.url,
            'default_branch': self.default_branch,
            'last_default_commit_at': (
                self.last_default_commit_at.isoformat() if self.last_default_commit_at else None
            ),
            'branches': [b.to_dict() for b in self.branches],
            'versions': [v.to_dict() for v in self.versions],
            'published_versions': [p.to_dict() for p in self.published_versions],
            'ci_build_url': self.ci_build_url,
            'default_branch_stale': self.default_branch_stale,
        }
        if self.error is not None:
            result['error'] = self.error
        return result


@dataclass(frozen=True)
class ProjectOutcome:
    """
    Result of aggregating one project: either a record or an error.

    Exactly one of record/error is set.
    """
    project: TrackedProject
    record: Optional[ProjectRecord] = None
    error: Optional[BaseException] = None

    @classmethod
    def success(cls, project: TrackedProject, record: ProjectRecord) -> 'ProjectOutcome':
        return cls(project=project, record=record)

    @classmethod
    def failure(cls, project: TrackedProject, error: BaseException) -> 'ProjectOutcome':
        return cls(project=project, error=error)

    @property
    def ok(self) -> bool:
        return self.record is not None

    def to_record(self) -> ProjectRecord:
        """The record, or a degraded record built from the error."""
        if self.record is not None:
            return self.record
        return ProjectRecord.degraded(self.project, str(self.error) if self.error else None)
