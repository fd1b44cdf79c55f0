"""
Remote version probe.

Asks a SurrealDB server for its version over ``GET /version`` and checks
it against the range of server versions this engine speaks to.
"""

import logging
import re

import httpx

from .exceptions import UnsupportedVersion, VersionRetrievalFailure

logger = logging.getLogger(__name__)

SUPPORTED_VERSION_MIN = (2, 0, 0)
SUPPORTED_VERSION_UNTIL = (4, 0, 0)
SUPPORTED_VERSION_RANGE = ">= 2.0.0 < 4.0.0"

DEFAULT_VERSION_TIMEOUT = 5.0

_VERSION_PATTERN = re.compile(r"^(\d+)\.(\d+)\.(\d+)")

_HTTP_SCHEMES = {"http": "http", "https": "https", "ws": "http", "wss": "https"}


def parse_version(version: str) -> tuple[int, int, int]:
    """Parse the leading ``major.minor.patch`` of a version string."""
    match = _VERSION_PATTERN.match(version.strip())
    if not match:
        raise ValueError(f"Invalid version string: {version!r}")
    major, minor, patch = (int(part) for part in match.groups())
    return major, minor, patch


def is_version_supported(version: str) -> bool:
    """Check whether ``version`` lies in the supported server range."""
    return SUPPORTED_VERSION_MIN <= parse_version(version) < SUPPORTED_VERSION_UNTIL


def version_url(url: str | httpx.URL) -> httpx.URL:
    """
    Build the ``/version`` URL next to an RPC endpoint.

    WebSocket schemes are mapped to their HTTP counterparts, and the
    ``version`` path is resolved relative to the given URL, so
    ``ws://host:8000/rpc`` becomes ``http://host:8000/version``.
    """
    url = httpx.URL(url)
    scheme = _HTTP_SCHEMES.get(url.scheme)
    if scheme is None:
        raise VersionRetrievalFailure(f"Unsupported URL scheme for version check: {url.scheme!r}")
    return url.copy_with(scheme=scheme).join("version")


async def retrieve_remote_version(
    url: str | httpx.URL,
    timeout: float = DEFAULT_VERSION_TIMEOUT,
    client: httpx.AsyncClient | None = None,
) -> str:
    """
    Fetch and validate the version reported by a SurrealDB server.

    Args:
        url: Server or RPC endpoint URL
        timeout: Seconds to wait for the answer
        client: Optional HTTP client to reuse

    Returns:
        The bare version string, e.g. ``"2.1.4"``

    Raises:
        VersionRetrievalFailure: If the server cannot be reached, times out,
            answers with a non-200 status or an unparseable version
        UnsupportedVersion: If the version is outside the supported range
    """
    target = version_url(url)

    try:
        if client is None:
            async with httpx.AsyncClient(timeout=timeout) as owned:
                response = await owned.get(target)
        else:
            response = await client.get(target, timeout=timeout)
    except httpx.HTTPError as e:
        raise VersionRetrievalFailure(f"Failed to retrieve remote version: {e}", cause=e) from e

    if response.status_code != 200:
        raise VersionRetrievalFailure(
            f"Failed to retrieve remote version: HTTP {response.status_code} {response.reason_phrase}"
        )

    version = response.text.strip().removeprefix("surrealdb-")
    try:
        supported = is_version_supported(version)
    except ValueError as e:
        raise VersionRetrievalFailure(f"Failed to parse remote version {version!r}", cause=e) from e

    if not supported:
        raise UnsupportedVersion(version, SUPPORTED_VERSION_RANGE)

    logger.debug("Remote SurrealDB version %s at %s", version, target)
    return version
