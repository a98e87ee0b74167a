"""oEmbed metadata resolution for song links."""

from __future__ import annotations

import json
import logging
from typing import Any, Protocol

import httpx

from songnote.config import ResolverConfig
from songnote.exceptions import DecodeError, TransportError, UpstreamError
from songnote.models.metadata import MetadataFragment
from songnote.utils.http import create_http_client
from songnote.utils.text import (
    split_on_first,
    strip_known_suffix,
    strip_separator_artifacts,
)
from songnote.utils.url import canonical_watch_url, find_player_url, is_youtube_url

logger = logging.getLogger(__name__)

TITLE_SEPARATOR = " - "


class EmbedResolverProtocol(Protocol):
    """Protocol for the first resolution stage."""

    def resolve(self, link: str) -> MetadataFragment:
        """Resolve a link into a metadata fragment."""
        ...


def _text_field(payload: dict[str, Any], key: str) -> str:
    value = payload.get(key)
    return value.strip() if isinstance(value, str) else ""


def _is_artist_author(author: str, config: ResolverConfig) -> bool:
    """Check whether an oEmbed author name can be trusted as the artist.

    Platform brand names are rejected. Auto-generated "<Artist> - Topic"
    channels are accepted once the label suffix is removed; any other
    occurrence of the marker rejects the author.
    """
    name = strip_known_suffix(author, config.channel_suffix)
    if not name or name.lower() in config.excluded_authors:
        return False
    return config.channel_marker not in name


def split_embed_title(
    title: str, author: str, config: ResolverConfig
) -> tuple[str | None, str | None]:
    """Derive (title, artist) from raw oEmbed title and author.

    A trusted author becomes the artist and is excised from the title.
    Otherwise the title is split on the first " - " as "Artist - Title".

    Returns:
        (title, artist), either of which may be None.
    """
    song_title: str | None = None
    artist: str | None = None

    if _is_artist_author(author, config):
        artist = strip_known_suffix(author, config.channel_suffix)
        if title and artist in title:
            # A title made only of the artist name stays as is
            song_title = strip_separator_artifacts(title, artist) or title
        else:
            song_title = title or None
    elif title:
        if parts := split_on_first(title, TITLE_SEPARATOR):
            artist, song_title = parts
        else:
            song_title = title

    if artist:
        artist = strip_known_suffix(artist, config.channel_suffix)
    return song_title or None, artist or None


def extract_embed_video_url(payload: dict[str, Any]) -> str | None:
    """Find a YouTube watch URL in an oEmbed payload.

    The player markup takes precedence; the provider URL is only used
    when it points at YouTube.
    """
    if player_url := find_player_url(_text_field(payload, "html")):
        return canonical_watch_url(player_url)
    provider_url = _text_field(payload, "provider_url")
    if is_youtube_url(provider_url):
        return provider_url
    return None


def parse_oembed_payload(
    payload: dict[str, Any], config: ResolverConfig | None = None
) -> MetadataFragment:
    """Turn a decoded oEmbed response into a metadata fragment.

    Args:
        payload: Decoded JSON object with title/author_name/provider_url/html.
        config: Resolver configuration. Uses defaults if not provided.

    Returns:
        Fragment with whatever could be derived. An empty fragment is a
        valid result, not an error.
    """
    config = config or ResolverConfig()
    title, artist = split_embed_title(
        _text_field(payload, "title"), _text_field(payload, "author_name"), config
    )
    return MetadataFragment(
        title=title,
        artist=artist,
        video_url=extract_embed_video_url(payload),
    )


class EmbedMetadataResolver:
    """Resolve song links through the song.link oEmbed endpoint.

    Example:
        >>> with EmbedMetadataResolver() as resolver:
        ...     fragment = resolver.resolve("https://song.link/s/...")
    """

    def __init__(
        self,
        config: ResolverConfig | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        """Initialize the resolver.

        Args:
            config: Resolver configuration. Uses defaults if not provided.
            client: Optional shared HTTP client. When omitted, the resolver
                creates and owns one.
        """
        self._config = config or ResolverConfig()
        self._http_client = client
        self._owns_client = client is None

    def _get_http_client(self) -> httpx.Client:
        if self._http_client is None:
            self._http_client = create_http_client(self._config.timeout)
        return self._http_client

    def close(self) -> None:
        """Close the HTTP client if this resolver created it."""
        if self._owns_client and self._http_client is not None:
            self._http_client.close()
            self._http_client = None

    def __enter__(self) -> EmbedMetadataResolver:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def fetch_payload(self, link: str) -> dict[str, Any]:
        """Query the oEmbed endpoint for a link.

        Raises:
            TransportError: On network failure.
            UpstreamError: On a non-200 response.
            DecodeError: If the body is not a JSON object.
        """
        params = {"url": link, "format": "json"}
        try:
            response = self._get_http_client().get(
                self._config.oembed_endpoint, params=params
            )
        except httpx.HTTPError as e:
            raise TransportError(f"Failed to fetch oEmbed data for {link}: {e}") from e

        if response.status_code != httpx.codes.OK:
            raise UpstreamError(
                f"oEmbed request for {link} failed with status "
                f"{response.status_code}",
                upstream_status=response.status_code,
                body=response.text,
            )

        try:
            payload = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise DecodeError(
                f"Failed to decode oEmbed response for {link}: {e}"
            ) from e
        if not isinstance(payload, dict):
            raise DecodeError(f"oEmbed response for {link} is not a JSON object")
        return payload

    def resolve(self, link: str) -> MetadataFragment:
        """Resolve a link into (title, artist, video URL).

        Raises:
            TransportError, UpstreamError, DecodeError: See fetch_payload().
        """
        fragment = parse_oembed_payload(self.fetch_payload(link), self._config)
        logger.debug(
            "oEmbed result for %s: title=%r artist=%r video_url=%r",
            link,
            fragment.title,
            fragment.artist,
            fragment.video_url,
        )
        return fragment
