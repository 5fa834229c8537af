"""
GitHub API client infrastructure for pubstatus.

Provides branch and tag metadata for one repository per call:
- Single GraphQL query per repository (default branch, branches, tags, URL)
- Bearer token authentication
- Rate limit tracking from response headers

Queries are never retried; a failed lookup is reported to the caller.
"""

import os
import time
import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, List, Dict, Any, Tuple

import requests

from ..domain.branch import BranchRef, PAGES_BRANCH
from ..errors import RepositoryLookupError

logger = logging.getLogger(__name__)

GRAPHQL_URL = "https://api.github.com/graphql"

# GitHub caps connection page size at 100
DEFAULT_PAGE_SIZE = 100

REPOSITORY_QUERY = """
query($owner: String!, $name: String!, $first: Int!) {
  repository(owner: $owner, name: $name) {
    defaultBranchRef {
      name
      target { ... on Commit { committedDate } }
    }
    branches: refs(refPrefix: "refs/heads/", first: $first) {
      nodes {
        name
        target { ... on Commit { committedDate } }
      }
    }
    tags: refs(refPrefix: "refs/tags/", first: $first) {
      nodes { name }
    }
    url
  }
}
"""


@dataclass
class RateLimitStatus:
    """GitHub API rate limit status."""
    remaining: int
    limit: int
    reset_time: int  # Unix timestamp
    used: int

    @property
    def minutes_until_reset(self) -> int:
        """Minutes until rate limit resets."""
        now = int(time.time())
        return max(0, (self.reset_time - now) // 60)

    @property
    def is_low(self) -> bool:
        """Check if rate limit is getting low (< 100 remaining)."""
        return self.remaining < 100


def parse_github_datetime(value: Optional[str]) -> Optional[datetime]:
    """Parse a GitHub ISO-8601 timestamp ("2024-05-01T12:00:00Z") as aware UTC."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace('Z', '+00:00'))
    except ValueError:
        logger.debug(f"Unparseable GitHub timestamp: {value!r}")
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _committed_date(node: Optional[Dict[str, Any]]) -> Optional[datetime]:
    target = (node or {}).get('target') or {}
    return parse_github_datetime(target.get('committedDate'))


@dataclass(frozen=True)
class RepositoryMetadata:
    """Branch and tag metadata for one GitHub repository."""
    repo: str
    url: str
    default_branch: str
    default_branch_committed_at: Optional[datetime]
    branches: Tuple[BranchRef, ...]
    tag_names: Tuple[str, ...]

    @classmethod
    def from_api_response(cls, repo: str, data: Dict[str, Any]) -> 'RepositoryMetadata':
        """
        Create from the 'repository' object of the GraphQL response.

        gh-pages and branches without a commit date are dropped here.
        """
        default_ref = data.get('defaultBranchRef') or {}
        default_branch = default_ref.get('name') or ''

        branches: List[BranchRef] = []
        for node in (data.get('branches') or {}).get('nodes') or []:
            if not node or node.get('name') == PAGES_BRANCH:
                continue
            committed_at = _committed_date(node)
            if committed_at is None:
                logger.debug(f"{repo}: skipping branch {node.get('name')!r} without commit date")
                continue
            branches.append(BranchRef(name=node['name'], committed_at=committed_at))

        tag_names = tuple(
            node['name']
            for node in (data.get('tags') or {}).get('nodes') or []
            if node and node.get('name')
        )

        return cls(
            repo=repo,
            url=data.get('url') or '',
            default_branch=default_branch,
            default_branch_committed_at=_committed_date(default_ref),
            branches=tuple(branches),
            tag_names=tag_names,
        )


class GitHubClient:
    """
    GitHub GraphQL client.

    Example:
        client = GitHubClient(token="ghp_...")
        meta = client.get_repository_metadata("WorldHealthOrganization/smart-anc")
        print(meta.default_branch, len(meta.branches))
    """

    def __init__(
        self,
        token: Optional[str] = None,
        graphql_url: str = GRAPHQL_URL,
        timeout: float = 30,
        page_size: int = DEFAULT_PAGE_SIZE
    ):
        """
        Initialize GitHubClient.

        Args:
            token: GitHub token (defaults to PUBSTATUS_GITHUB_TOKEN or GITHUB_TOKEN env var)
            graphql_url: GraphQL endpoint
            timeout: HTTP request timeout in seconds
            page_size: Number of branches/tags requested (max 100)
        """
        self.token = token or os.environ.get('PUBSTATUS_GITHUB_TOKEN') or os.environ.get('GITHUB_TOKEN')
        self.graphql_url = graphql_url
        self.timeout = timeout
        self.page_size = min(page_size, DEFAULT_PAGE_SIZE)
        self._rate_limit_status: Optional[RateLimitStatus] = None
        self._lock = threading.Lock()
        # requests.Session is not thread-safe; one per worker thread
        self._local = threading.local()

        if not self.token:
            logger.warning("No GitHub token configured; GraphQL queries will be rejected")

    @property
    def session(self) -> requests.Session:
        """HTTP session of the calling thread."""
        session = getattr(self._local, 'session', None)
        if session is None:
            session = requests.Session()
            session.headers.update({
                'Content-Type': 'application/json',
                'User-Agent': 'pubstatus',
            })
            if self.token:
                session.headers['Authorization'] = f'Bearer {self.token}'
            self._local.session = session
        return session

    def _update_rate_limit_from_headers(self, headers) -> None:
        """Update rate limit status from response headers."""
        try:
            remaining = int(headers.get('X-RateLimit-Remaining', -1))
            limit = int(headers.get('X-RateLimit-Limit', -1))
            reset_time = int(headers.get('X-RateLimit-Reset', 0))
            used = int(headers.get('X-RateLimit-Used', 0))
        except (ValueError, TypeError):
            return

        if remaining >= 0 and limit >= 0:
            status = RateLimitStatus(
                remaining=remaining,
                limit=limit,
                reset_time=reset_time,
                used=used
            )
            with self._lock:
                self._rate_limit_status = status

            if status.is_low:
                logger.warning(
                    f"GitHub API rate limit low: {remaining}/{limit} remaining, "
                    f"resets in {status.minutes_until_reset} minutes"
                )

    def get_rate_limit_status(self) -> Optional[RateLimitStatus]:
        """Rate limit status seen on the last response, if any."""
        with self._lock:
            return self._rate_limit_status

    def _graphql(self, repo: str, query: str, variables: Dict[str, Any]) -> Dict[str, Any]:
        """POST a GraphQL query and return the decoded body."""
        try:
            response = self.session.post(
                self.graphql_url,
                json={'query': query, 'variables': variables},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise RepositoryLookupError(repo, f"request failed: {e}") from e

        self._update_rate_limit_from_headers(response.headers)

        if response.status_code != 200:
            raise RepositoryLookupError(repo, f"HTTP {response.status_code}")

        try:
            body = response.json()
        except ValueError as e:
            raise RepositoryLookupError(repo, f"invalid JSON: {e}") from e

        if not isinstance(body, dict):
            raise RepositoryLookupError(repo, "unexpected response shape")
        return body

    def get_repository_metadata(self, repo: str) -> RepositoryMetadata:
        """
        Fetch default branch, branches, tags and web URL of a repository.

        Args:
            repo: Repository as "owner/repo"

        Returns:
            RepositoryMetadata (gh-pages already removed)

        Raises:
            RepositoryLookupError: if the repository cannot be resolved
        """
        owner, _, name = repo.strip().partition('/')
        if not owner or not name:
            raise RepositoryLookupError(repo, "expected 'owner/repo'")

        body = self._graphql(repo, REPOSITORY_QUERY, {
            'owner': owner,
            'name': name,
            'first': self.page_size,
        })

        repository = (body.get('data') or {}).get('repository')
        if not repository:
            errors = body.get('errors') or []
            reason = errors[0].get('message') if errors and isinstance(errors[0], dict) else None
            raise RepositoryLookupError(repo, reason)

        metadata = RepositoryMetadata.from_api_response(repo, repository)
        logger.debug(
            f"{repo}: {len(metadata.branches)} branches, {len(metadata.tag_names)} tags"
        )
        return metadata
