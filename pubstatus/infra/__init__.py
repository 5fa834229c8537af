"""
Infrastructure layer for pubstatus.

Contains abstractions for external systems:
- GitHubClient: GitHub GraphQL access (branches, tags)
- ManifestClient: published package-list.json access
- resolve_proxy_url: routing of published sites to the manifest proxy

These provide clean interfaces that can be mocked for testing.
"""

from .github_client import GitHubClient, RateLimitStatus, RepositoryMetadata
from .manifest_client import ManifestClient
from .proxy import resolve_proxy_url, PROXY_ROUTES

__all__ = [
    'GitHubClient',
    'RateLimitStatus',
    'RepositoryMetadata',
    'ManifestClient',
    'resolve_proxy_url',
    'PROXY_ROUTES',
]
