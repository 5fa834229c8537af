"""
Project service for pubstatus.

Builds the consolidated ProjectRecord of one tracked project from
GitHub metadata and the published manifest. Failures never leave this
service: they are returned as a failed ProjectOutcome, which renders
as a degraded record.
"""

from datetime import datetime, timezone
from typing import Optional, Dict, Any
import logging

from ..domain import (
    TrackedProject,
    ProjectRecord,
    ProjectOutcome,
    classify_branches,
    reconcile_versions,
    tag_versions_from_names,
)
from ..domain.branch import STALE_AFTER_DAYS, days_between
from ..errors import RepositoryLookupError
from ..infra import GitHubClient, ManifestClient

logger = logging.getLogger(__name__)


class ProjectService:
    """
    Service that aggregates one tracked project.

    Example:
        service = ProjectService()
        outcome = service.aggregate(TrackedProject("ANC", "WorldHealthOrganization/smart-anc"))
        record = outcome.to_record()
    """

    def __init__(
        self,
        github_client: Optional[GitHubClient] = None,
        manifest_client: Optional[ManifestClient] = None,
        config: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize ProjectService.

        Args:
            github_client: GitHub client instance (creates default if None)
            manifest_client: Manifest client instance (creates default if None)
            config: Configuration dict
        """
        self.config = config or {}
        self.github = github_client or GitHubClient()
        self.manifests = manifest_client or ManifestClient()
        self.stale_after_days = self.config.get('fleet', {}).get('stale_after_days', STALE_AFTER_DAYS)

    def aggregate(self, project: TrackedProject, now: Optional[datetime] = None) -> ProjectOutcome:
        """
        Aggregate one project. Never raises.

        Args:
            project: Project to aggregate
            now: Reference time for branch staleness (defaults to current UTC time)

        Returns:
            ProjectOutcome holding either the record or the error
        """
        now = now or datetime.now(timezone.utc)
        try:
            record = self._build(project, now)
        except RepositoryLookupError as e:
            logger.warning(f"Failed to load project [{project.name}]: {e}")
            return ProjectOutcome.failure(project, e)
        except Exception as e:
            logger.exception(f"Failed to load project [{project.name}]: {e}")
            return ProjectOutcome.failure(project, e)
        return ProjectOutcome.success(project, record)

    def build_record(self, project: TrackedProject, now: Optional[datetime] = None) -> ProjectRecord:
        """Aggregate one project and return its (possibly degraded) record."""
        return self.aggregate(project, now).to_record()

    def _build(self, project: TrackedProject, now: datetime) -> ProjectRecord:
        metadata = self.github.get_repository_metadata(project.repo)

        published = []
        if project.published:
            published = self.manifests.get_published_versions(project.published)

        branches = classify_branches(
            metadata.branches,
            metadata.default_branch,
            now,
            stale_after_days=self.stale_after_days,
        )
        versions = reconcile_versions(tag_versions_from_names(metadata.tag_names), published)
        last_commit = metadata.default_branch_committed_at
        default_stale = last_commit is not None and days_between(last_commit, now) > self.stale_after_days

        return ProjectRecord(
            name=project.name,
            repo=project.repo,
            url=metadata.url,
            default_branch=metadata.default_branch,
            last_default_commit_at=metadata.default_branch_committed_at,
            branches=tuple(branches),
            versions=tuple(versions),
            published_versions=tuple(published),
            ci_build_url=project.ci_build_url,
            default_branch_stale=default_stale,
        )
