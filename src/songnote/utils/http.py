"""Shared HTTP client construction."""

from importlib.metadata import version

import httpx

# Get version from package metadata for User-Agent
_VERSION = version("songnote")

USER_AGENT = f"songnote/{_VERSION}"


def create_http_client(timeout: float = 30.0) -> httpx.Client:
    """Create an httpx client with songnote defaults.

    Redirects are followed because share links usually bounce through
    a short-link service before reaching the rendered page.
    """
    return httpx.Client(
        timeout=timeout,
        follow_redirects=True,
        headers={"User-Agent": USER_AGENT},
    )
