"""Test fixtures and configuration."""

from collections.abc import Callable, Iterator

import httpx
import pytest
from songnote.config import ResolverConfig

Handler = Callable[[httpx.Request], httpx.Response]

VIDEO_ID = "dQw4w9WgXcQ"


@pytest.fixture
def resolver_config() -> ResolverConfig:
    """Create a default resolver config."""
    return ResolverConfig()


@pytest.fixture
def make_client() -> Iterator[Callable[[Handler], httpx.Client]]:
    """Build httpx clients backed by a mock transport."""
    clients: list[httpx.Client] = []

    def factory(handler: Handler) -> httpx.Client:
        client = httpx.Client(transport=httpx.MockTransport(handler))
        clients.append(client)
        return client

    yield factory

    for client in clients:
        client.close()


@pytest.fixture
def sample_oembed_payload() -> dict[str, str]:
    """Create an oEmbed payload with a YouTube player."""
    return {
        "title": "Song X - Artist Y",
        "author_name": "Artist Y",
        "provider_url": "https://www.youtube.com/",
        "html": (
            '<iframe width="200" height="113" '
            f'src="https://www.youtube.com/embed/{VIDEO_ID}?feature=oembed" '
            'frameborder="0" allowfullscreen></iframe>'
        ),
    }
