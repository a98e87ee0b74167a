"""Fallback metadata resolution for song links.

Pipeline Overview:
==================
1. Embed stage - query the oEmbed endpoint (EmbedMetadataResolver)
2. Page stage - scrape the rendered page (PageMetadataScraper), only when
   the embed stage left the video URL empty or found neither title nor
   artist
3. Merge - fragments are combined first-non-empty-wins per field, in
   stage order

Stage failures never abort a resolution; they are logged and recorded in
the returned trace.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Protocol

import httpx

from songnote.config import ResolverConfig
from songnote.exceptions import ResolutionError
from songnote.models.metadata import (
    MetadataFragment,
    Resolution,
    ResolvedMetadata,
    StageOutcome,
)
from songnote.services.embed import EmbedMetadataResolver, EmbedResolverProtocol
from songnote.services.page import PageMetadataScraper
from songnote.utils.http import create_http_client
from songnote.utils.text import split_on_first, strip_known_suffix

logger = logging.getLogger(__name__)

STAGE_EMBED = "embed"
STAGE_PAGE = "page"

_FRAGMENT_FIELDS = ("title", "artist", "video_url")


class PageScraperProtocol(Protocol):
    """Protocol for the page fallback stage."""

    def scrape(self, link: str) -> MetadataFragment:
        """Scrape raw combined text and a video URL for a link."""
        ...


def merge_fragments(fragments: Iterable[MetadataFragment]) -> ResolvedMetadata:
    """Merge fragments, first non-empty value wins per field.

    Args:
        fragments: Fragments in precedence order (highest first).

    Returns:
        Merged metadata; fields no fragment provided stay None.
    """
    merged: dict[str, str] = {}
    for fragment in fragments:
        for name in _FRAGMENT_FIELDS:
            value = getattr(fragment, name)
            if value and name not in merged:
                merged[name] = value
    return ResolvedMetadata(**merged)


def split_combined_title(
    text: str, channel_suffix: str = " - Topic"
) -> tuple[str | None, str | None]:
    """Split raw page text into (title, artist).

    " by " is tried first ("Title by Artist"), then " - "
    ("Artist - Title"). Without either separator the whole text is the
    title.

    Example:
        >>> split_combined_title("Midnight - DJ Nova")
        ('DJ Nova', 'Midnight')
        >>> split_combined_title("Midnight by DJ Nova")
        ('Midnight', 'DJ Nova')
    """
    text = text.strip()
    if not text:
        return None, None
    if parts := split_on_first(text, " by "):
        title, artist = parts
    elif parts := split_on_first(text, " - "):
        artist, title = parts
    else:
        title, artist = text, ""
    if artist:
        artist = strip_known_suffix(artist, channel_suffix)
    return title or None, artist or None


class MetadataResolver:
    """Resolve a song link to (title, artist, video URL) with fallbacks.

    Example:
        >>> with MetadataResolver() as resolver:
        ...     resolution = resolver.resolve("https://song.link/s/...")
        >>> resolution.metadata.title
        >>> resolution.download_target
    """

    def __init__(
        self,
        config: ResolverConfig | None = None,
        *,
        embed: EmbedResolverProtocol | None = None,
        page: PageScraperProtocol | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        """Initialize the resolver.

        Args:
            config: Resolver configuration. Uses defaults if not provided.
            embed: Optional embed stage (creates default if not provided).
            page: Optional page stage (creates default if not provided).
            client: Optional HTTP client shared by the default stages.
        """
        self._config = config or ResolverConfig()
        self._owns_client = client is None and (embed is None or page is None)
        if self._owns_client:
            client = create_http_client(self._config.timeout)
        self._client = client
        self._embed = embed or EmbedMetadataResolver(self._config, client=client)
        self._page = page or PageMetadataScraper(self._config, client=client)

    def close(self) -> None:
        """Close the HTTP client if this resolver created it."""
        if self._owns_client and self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self) -> MetadataResolver:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def _run_embed(self, link: str) -> StageOutcome:
        try:
            fragment = self._embed.resolve(link)
        except ResolutionError as e:
            logger.warning("oEmbed lookup for %s failed: %s", link, e)
            return StageOutcome(stage=STAGE_EMBED, error=str(e))
        return StageOutcome(stage=STAGE_EMBED, fragment=fragment)

    def _run_page(self, link: str, current: ResolvedMetadata) -> StageOutcome:
        logger.info(
            "oEmbed data for %s is incomplete (title=%r, artist=%r, video_url=%r), "
            "trying the page itself",
            link,
            current.title,
            current.artist,
            current.video_url,
        )
        try:
            scraped = self._page.scrape(link)
        except ResolutionError as e:
            logger.warning("Page fallback for %s failed: %s", link, e)
            return StageOutcome(stage=STAGE_PAGE, error=str(e))

        title = artist = None
        # Raw page text only fills in when the embed stage found neither field
        if scraped.title and not (current.title or current.artist):
            title, artist = split_combined_title(
                scraped.title, self._config.channel_suffix
            )
        fragment = MetadataFragment(
            title=title, artist=artist, video_url=scraped.video_url
        )
        return StageOutcome(stage=STAGE_PAGE, fragment=fragment)

    def resolve(self, link: str) -> Resolution:
        """Resolve a link. Never raises for stage failures.

        Args:
            link: Song link as supplied by the user.

        Returns:
            Best-effort resolution; metadata fields may all be None.
        """
        link = link.strip()
        trace = [self._run_embed(link)]
        metadata = merge_fragments(o.fragment for o in trace if o.fragment)

        if metadata.needs_fallback:
            trace.append(self._run_page(link, metadata))
            metadata = merge_fragments(o.fragment for o in trace if o.fragment)

        if not metadata.video_url:
            logger.info(
                "No YouTube URL found for %s, the link itself will be downloaded",
                link,
            )
        logger.info(
            "Resolved %s: title=%r artist=%r video_url=%r",
            link,
            metadata.title,
            metadata.artist,
            metadata.video_url,
        )
        return Resolution(source_link=link, metadata=metadata, trace=tuple(trace))
