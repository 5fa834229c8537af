"""
Fleet service for pubstatus.

Runs the project service for every tracked project concurrently and
returns the records in project-list order, whatever order the network
calls complete in.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Callable, Optional, Sequence, List, Dict, Any

from ..domain import TrackedProject, ProjectRecord, ProjectOutcome
from .project_service import ProjectService

logger = logging.getLogger(__name__)

# Default number of project pipelines in flight at once
DEFAULT_MAX_CONCURRENCY = 8

ProgressCallback = Callable[[int, int, ProjectRecord], None]


class FleetService:
    """
    Service that aggregates the whole project list.

    Example:
        fleet = FleetService(project_service)
        records = fleet.aggregate(projects)
        for record in records:
            print(record.name, len(record.versions))
    """

    def __init__(
        self,
        project_service: Optional[ProjectService] = None,
        max_concurrency: Optional[int] = None,
        config: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize FleetService.

        Args:
            project_service: Per-project service (creates default if None)
            max_concurrency: Pipelines in flight at once; 0 or less means unbounded
            config: Configuration dict (reads fleet.max_concurrency)
        """
        self.config = config or {}
        self.projects = project_service or ProjectService(config=self.config)
        if max_concurrency is None:
            max_concurrency = self.config.get('fleet', {}).get(
                'max_concurrency', DEFAULT_MAX_CONCURRENCY
            )
        self.max_concurrency = max_concurrency

    def aggregate(
        self,
        projects: Sequence[TrackedProject],
        now: Optional[datetime] = None,
        on_complete: Optional[ProgressCallback] = None
    ) -> List[ProjectRecord]:
        """
        Aggregate all projects (blocking).

        Args:
            projects: Tracked projects, in display order
            now: Reference time shared by all projects (defaults to current UTC time)
            on_complete: Called as (done, total, record) each time a project finishes

        Returns:
            One ProjectRecord per project, in input order
        """
        return asyncio.run(self.aggregate_async(projects, now=now, on_complete=on_complete))

    async def aggregate_async(
        self,
        projects: Sequence[TrackedProject],
        now: Optional[datetime] = None,
        on_complete: Optional[ProgressCallback] = None
    ) -> List[ProjectRecord]:
        """Coroutine version of aggregate()."""
        now = now or datetime.now(timezone.utc)
        total = len(projects)
        if total == 0:
            return []

        limit = self.max_concurrency if self.max_concurrency and self.max_concurrency > 0 else total
        semaphore = asyncio.Semaphore(limit)
        loop = asyncio.get_running_loop()
        done = 0

        async def run_one(project: TrackedProject) -> ProjectRecord:
            nonlocal done
            async with semaphore:
                try:
                    # ProjectService does blocking HTTP; keep it off the loop
                    outcome = await loop.run_in_executor(None, self.projects.aggregate, project, now)
                except Exception as e:
                    logger.exception(f"Failed to load project [{project.name}]: {e}")
                    outcome = ProjectOutcome.failure(project, e)

            record = outcome.to_record()
            done += 1
            if on_complete:
                on_complete(done, total, record)
            return record

        logger.debug(f"Aggregating {total} projects, max {limit} in flight")
        # gather keeps argument order
        records = await asyncio.gather(*[run_one(project) for project in projects])

        degraded = sum(1 for r in records if r.is_degraded)
        if degraded:
            logger.info(f"{degraded}/{total} projects could not be loaded")
        return list(records)
