"""
Routing of published-site URLs to manifest proxy paths.

Published sites are served from hosts that do not allow cross-origin
reads, so each known host is mirrored under a local /proxy/ prefix.
"""

import logging
import warnings
from typing import Tuple
from urllib.parse import urlparse

from ..errors import UnknownProxyHost

logger = logging.getLogger(__name__)

MANIFEST_FILENAME = 'package-list.json'

# (host substring, proxy prefix), checked in order
PROXY_ROUTES: Tuple[Tuple[str, str], ...] = (
    ('smart.who.int', '/proxy/smart'),
    ('fhir.org', '/proxy/fhir'),
    ('github.io', '/proxy/githubio'),
)


def resolve_proxy_url(published_url: str) -> str:
    """
    Map a published-site URL to the proxy path of its manifest.

    Examples:
        https://smart.who.int/anc      -> /proxy/smart/anc/package-list.json
        https://build.fhir.org/ig/x/y  -> /proxy/fhir/ig/x/y/package-list.json
        https://me.github.io/site      -> /proxy/githubio/site/package-list.json

    Unknown hosts are returned unchanged with an UnknownProxyHost warning.

    Args:
        published_url: URL of the published site

    Returns:
        Path (or URL) from which the manifest can be fetched
    """
    parsed = urlparse(published_url)
    host = parsed.hostname or ''

    for host_fragment, prefix in PROXY_ROUTES:
        if host_fragment in host:
            return f"{prefix}{parsed.path}/{MANIFEST_FILENAME}"

    logger.warning(f"No proxy for host: {host or published_url}")
    warnings.warn(f"No proxy for host: {host or published_url}", UnknownProxyHost, stacklevel=2)
    return published_url
