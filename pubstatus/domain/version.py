"""
Version domain objects for pubstatus.

Versions come from two independent authorities:
- Repository tags (e.g. "v1.0.0") -> tag versions
- The published package-list.json manifest -> PublishedVersionEntry

reconcile_versions() merges both into one ReconciledVersion per distinct
version identifier.
"""

from dataclasses import dataclass
from typing import Optional, List, Dict, Any, Iterable, Sequence


# Placeholder names used for the "current build" on the publishing side.
# They are never real versions.
SENTINEL_VERSIONS = frozenset({'current', 'vcurrent'})


def is_sentinel_version(raw: str) -> bool:
    """Check whether a raw tag/version string is a 'current' placeholder."""
    return raw.strip().lower() in SENTINEL_VERSIONS


def normalize_version(raw: str) -> str:
    """
    Normalize a raw tag name or manifest version to a version identifier.

    Strips surrounding whitespace and a single leading 'v'.

    Examples:
        normalize_version("v1.0.0")  -> "1.0.0"
        normalize_version("1.0.0")   -> "1.0.0"
        normalize_version("vv2")     -> "v2"
    """
    raw = raw.strip()
    if raw.startswith('v'):
        return raw[1:]
    return raw


def tag_versions_from_names(tag_names: Iterable[str]) -> List[str]:
    """
    Convert repository tag names to version identifiers.

    Sentinel tags are dropped, duplicates after normalization are removed
    and first-seen order is kept.
    """
    versions: List[str] = []
    seen = set()
    for name in tag_names:
        if not name or is_sentinel_version(name):
            continue
        version = normalize_version(name)
        if not version or is_sentinel_version(version) or version in seen:
            continue
        seen.add(version)
        versions.append(version)
    return versions


@dataclass(frozen=True)
class PublishedVersionEntry:
    """A version listed in the published manifest."""
    version: str
    published_url: Optional[str] = None

    @classmethod
    def from_manifest_entry(cls, data: Dict[str, Any]) -> Optional['PublishedVersionEntry']:
        """
        Create from one entry of a package-list.json 'list' array.

        Returns:
            PublishedVersionEntry or None if the entry has no usable version
        """
        raw = data.get('version')
        if not isinstance(raw, str) or not raw.strip():
            return None
        if is_sentinel_version(raw):
            return None

        version = normalize_version(raw)
        if not version or is_sentinel_version(version):
            return None

        # No path means listed but not actually published
        path = data.get('path')
        if not isinstance(path, str) or not path.strip():
            path = None
        return cls(version=version, published_url=path)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'version': self.version,
            'published_url': self.published_url,
        }


@dataclass(frozen=True)
class ReconciledVersion:
    """Merged view of one version across tags and the published manifest."""
    version: str
    has_tag: bool
    published_url: Optional[str] = None

    @property
    def is_published(self) -> bool:
        return self.published_url is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'version': self.version,
            'has_tag': self.has_tag,
            'published_url': self.published_url,
        }


def reconcile_versions(
    tag_versions: Sequence[str],
    published_entries: Sequence[PublishedVersionEntry]
) -> List[ReconciledVersion]:
    """
    Merge tag versions and published versions into one list.

    Tag versions come first in their original order, followed by
    versions that only exist in the manifest. Each distinct version
    identifier appears exactly once:
    - tag only       -> has_tag=True,  published_url=None
    - manifest only  -> has_tag=False, published_url=<path>
    - both           -> has_tag=True,  published_url=<path>

    When the manifest lists a version more than once, the first entry
    with a path wins. Entries without a path count as unpublished.

    Args:
        tag_versions: Normalized version identifiers from repository tags
        published_entries: Entries from the published manifest

    Returns:
        List of ReconciledVersion
    """
    published_urls: Dict[str, Optional[str]] = {}
    for entry in published_entries:
        if is_sentinel_version(entry.version):
            continue
        if published_urls.get(entry.version) is None:
            published_urls[entry.version] = entry.published_url

    tagged = {v for v in tag_versions if not is_sentinel_version(v)}

    # dict preserves insertion order, so this is an ordered union
    ordered: Dict[str, None] = {}
    for version in tag_versions:
        if version in tagged:
            ordered.setdefault(version, None)
    for version in published_urls:
        ordered.setdefault(version, None)

    return [
        ReconciledVersion(
            version=version,
            has_tag=version in tagged,
            published_url=published_urls.get(version),
        )
        for version in ordered
    ]
