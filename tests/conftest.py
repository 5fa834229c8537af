"""Shared fixtures: in-memory stand-ins for the GitHub and manifest clients."""

import threading
import time
from datetime import datetime, timedelta, timezone

import pytest

from pubstatus.domain import BranchRef, PublishedVersionEntry
from pubstatus.errors import RepositoryLookupError
from pubstatus.infra.github_client import RepositoryMetadata

NOW = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)


def make_metadata(repo, default_branch="main", branches=None, tags=(), url=None):
    """RepositoryMetadata with branches given as {name: age_in_days}."""
    branches = branches if branches is not None else {default_branch: 1}
    refs = tuple(
        BranchRef(name=name, committed_at=NOW - timedelta(days=age))
        for name, age in branches.items()
    )
    default_ref = next((b for b in refs if b.name == default_branch), None)
    return RepositoryMetadata(
        repo=repo,
        url=url or f"https://github.com/{repo}",
        default_branch=default_branch,
        default_branch_committed_at=default_ref.committed_at if default_ref else None,
        branches=refs,
        tag_names=tuple(tags),
    )


class FakeGitHubClient:
    """Serves RepositoryMetadata from a dict; missing repos raise RepositoryLookupError."""

    def __init__(self, repos=None, delays=None, errors=None):
        self.repos = repos or {}
        self.delays = delays or {}
        self.errors = errors or {}
        self.calls = []
        self.in_flight = 0
        self.max_in_flight = 0
        self._lock = threading.Lock()

    def get_repository_metadata(self, repo):
        with self._lock:
            self.calls.append(repo)
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if repo in self.delays:
                time.sleep(self.delays[repo])
            if repo in self.errors:
                raise self.errors[repo]
            if repo not in self.repos:
                raise RepositoryLookupError(repo)
            return self.repos[repo]
        finally:
            with self._lock:
                self.in_flight -= 1


class FakeManifestClient:
    """Serves published versions from a dict of {published_url: [(version, path), ...]}."""

    def __init__(self, manifests=None):
        self.manifests = manifests or {}
        self.calls = []

    def get_published_versions(self, published_url):
        self.calls.append(published_url)
        return [
            PublishedVersionEntry(version=version, published_url=path)
            for version, path in self.manifests.get(published_url, [])
        ]


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def metadata_factory():
    return make_metadata


@pytest.fixture
def fake_github():
    return FakeGitHubClient


@pytest.fixture
def fake_manifests():
    return FakeManifestClient
