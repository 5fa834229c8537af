"""
Service layer for pubstatus.

Contains business logic that orchestrates domain objects and infrastructure:
- ProjectService: one project -> one ProjectRecord (never raises)
- FleetService: project list -> ordered list of ProjectRecord

Services are the primary API for commands to use.
"""

from .project_service import ProjectService
from .fleet_service import FleetService

__all__ = [
    'ProjectService',
    'FleetService',
]
