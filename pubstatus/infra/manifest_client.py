"""
Published manifest client for pubstatus.

Reads the package-list.json of a published site through the manifest
proxy and decodes its version list:

    {"list": [{"version": "current", "path": "..."},
              {"version": "1.0.0", "path": "https://example.org/1.0.0"}]}

A missing or unreadable manifest is not fatal: it yields an empty list.
"""

import logging
import threading
from typing import List, Optional
from urllib.parse import urljoin

import requests

from ..domain.version import PublishedVersionEntry
from ..errors import ManifestFetchError
from .proxy import resolve_proxy_url

logger = logging.getLogger(__name__)

DEFAULT_PROXY_BASE_URL = "http://localhost:8080/"


class ManifestClient:
    """
    Client for published package-list.json manifests.

    Example:
        client = ManifestClient(proxy_base_url="https://dashboard.example.org/")
        for entry in client.get_published_versions("https://smart.who.int/anc"):
            print(entry.version, entry.published_url)
    """

    def __init__(self, proxy_base_url: Optional[str] = None, timeout: float = 30):
        """
        Initialize ManifestClient.

        Args:
            proxy_base_url: Base URL that serves the /proxy/ routes
            timeout: HTTP request timeout in seconds
        """
        self.proxy_base_url = proxy_base_url or DEFAULT_PROXY_BASE_URL
        self.timeout = timeout
        # requests.Session is not thread-safe; one per worker thread
        self._local = threading.local()

    @property
    def session(self) -> requests.Session:
        """HTTP session of the calling thread."""
        session = getattr(self._local, 'session', None)
        if session is None:
            session = requests.Session()
            session.headers.update({
                'Accept': 'application/json',
            })
            self._local.session = session
        return session

    def manifest_url(self, published_url: str) -> str:
        """Absolute URL of the manifest for a published site."""
        return urljoin(self.proxy_base_url, resolve_proxy_url(published_url))

    def _fetch_manifest(self, url: str) -> dict:
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise ManifestFetchError(url, str(e)) from e

        if not response.ok:
            raise ManifestFetchError(url, f"HTTP {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            raise ManifestFetchError(url, f"invalid JSON: {e}") from e

        if not isinstance(data, dict):
            raise ManifestFetchError(url, "manifest is not a JSON object")
        return data

    def _decode_entries(self, url: str, data: dict) -> List[PublishedVersionEntry]:
        items = data.get('list')
        if items is None:
            return []
        if not isinstance(items, list):
            raise ManifestFetchError(url, "'list' is not an array")

        entries = []
        for item in items:
            if not isinstance(item, dict):
                continue
            entry = PublishedVersionEntry.from_manifest_entry(item)
            if entry:
                entries.append(entry)
        return entries

    def get_published_versions(self, published_url: str) -> List[PublishedVersionEntry]:
        """
        Fetch the published versions of a site.

        Entries without a version and "current" placeholders are dropped;
        a leading 'v' is stripped. Manifest order is preserved.

        Args:
            published_url: URL of the published site (before proxy routing)

        Returns:
            List of PublishedVersionEntry, empty if the manifest is unavailable
        """
        try:
            try:
                url = self.manifest_url(published_url)
            except ValueError as e:
                raise ManifestFetchError(published_url, f"invalid published URL: {e}") from e
            entries = self._decode_entries(url, self._fetch_manifest(url))
        except ManifestFetchError as e:
            logger.warning(f"Could not load published versions: {e}")
            return []

        logger.debug(f"{published_url}: {len(entries)} published versions")
        return entries
