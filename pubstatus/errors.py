"""
Exception types for pubstatus.

Per-project errors (RepositoryLookupError, ManifestFetchError) are always
recovered inside the project pipeline. ConfigLoadError is fatal and is
raised before any project is aggregated.
"""

from typing import Optional


class PubStatusError(Exception):
    """Base class for pubstatus errors."""


class RepositoryLookupError(PubStatusError):
    """The repository metadata query did not return a repository."""

    def __init__(self, repo: str, reason: Optional[str] = None):
        message = f"Repository not found: {repo}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
        self.repo = repo
        self.reason = reason


class ManifestFetchError(PubStatusError):
    """The published manifest could not be read or decoded."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"Failed to fetch manifest {url}: {reason}")
        self.url = url
        self.reason = reason


class ConfigLoadError(PubStatusError):
    """The configuration or project list could not be loaded."""


class UnknownProxyHost(UserWarning):
    """No proxy route matches the host of a published manifest URL."""
