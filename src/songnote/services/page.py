"""Rendered page scraping for song links.

Extracts metadata from the HTML page behind a song link using three
techniques in priority order:

1. Open Graph meta tags (``og:title``, ``og:video:url``)
2. Page heuristics over markup structure (only when no title was found)
3. Raw-text scan for a YouTube watch URL (only when no video URL was found)

The title produced here is raw combined text ("Title by Artist",
"Artist - Title" or just a title); splitting it is the resolver's job.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Protocol

import httpx
from bs4 import BeautifulSoup, Tag

from songnote.config import ResolverConfig
from songnote.exceptions import ReadError, ScrapeExhaustedError, TransportError
from songnote.models.metadata import MetadataFragment
from songnote.utils.http import create_http_client
from songnote.utils.url import find_watch_url, is_youtube_url

logger = logging.getLogger(__name__)

OG_TITLE = "og:title"
OG_VIDEO_PROPERTIES = frozenset({"og:video:url", "og:video:secure_url"})


# ============================================================================
# PAGE HEURISTICS - replaceable extraction over markup not owned by us
# ============================================================================


class PageHeuristic(Protocol):
    """Best-effort title extraction from page structure.

    Implementations must return None, not raise, when the markup does
    not look as expected.
    """

    name: str

    def extract(self, soup: BeautifulSoup) -> str | None:
        """Extract raw combined title text from a parsed page."""
        ...


def _class_text(tag: Tag) -> str:
    classes = tag.get("class") or []
    if isinstance(classes, str):
        return classes
    return " ".join(classes)


def node_text(tag: Tag) -> str:
    """Join all descendant text nodes with single spaces."""
    return " ".join(tag.stripped_strings)


class StyleClassHeuristic:
    """Find title and artist blocks by generated style-class fragments.

    Looks for a container ``div`` whose class contains ``block_class``,
    then among its direct ``div`` children for one whose class contains
    ``title_class`` and one whose class contains ``artist_class``.

    The class names are build artefacts of the song.link frontend and
    change without notice; the heuristic then simply finds nothing.
    """

    name = "style-class"

    def __init__(self, block_class: str, title_class: str, artist_class: str) -> None:
        self._block_class = block_class
        self._title_class = title_class
        self._artist_class = artist_class

    @classmethod
    def from_config(cls, config: ResolverConfig) -> StyleClassHeuristic:
        return cls(config.block_class, config.title_class, config.artist_class)

    def extract(self, soup: BeautifulSoup) -> str | None:
        for block in soup.find_all("div"):
            if self._block_class not in _class_text(block):
                continue
            title = artist = ""
            for child in block.find_all("div", recursive=False):
                child_class = _class_text(child)
                if not title and self._title_class in child_class:
                    title = node_text(child)
                if not artist and self._artist_class in child_class:
                    artist = node_text(child)
            if title and artist:
                return f"{title} by {artist}"
            if title:
                return title
        return None


def default_heuristics(
    config: ResolverConfig | None = None,
) -> tuple[PageHeuristic, ...]:
    """Heuristics used when none are passed explicitly."""
    return (StyleClassHeuristic.from_config(config or ResolverConfig()),)


# ============================================================================
# EXTRACTION - pure functions over fetched content
# ============================================================================


def extract_meta_tags(soup: BeautifulSoup) -> MetadataFragment:
    """Read og:title and a YouTube og:video URL from meta tags.

    Returns:
        Fragment with ``title`` (raw combined text) and ``video_url``.
    """
    title: str | None = None
    video_url: str | None = None
    for meta in soup.find_all("meta"):
        prop = meta.get("property")
        content = (meta.get("content") or "").strip()
        if not content:
            continue
        if prop == OG_TITLE:
            title = content
        elif prop in OG_VIDEO_PROPERTIES and is_youtube_url(content):
            video_url = content
    return MetadataFragment(title=title, video_url=video_url)


class PageMetadataScraper:
    """Scrape metadata from the rendered page behind a song link.

    Example:
        >>> with PageMetadataScraper() as scraper:
        ...     fragment = scraper.scrape("https://song.link/s/...")
        ...     print(fragment.title, fragment.video_url)
    """

    def __init__(
        self,
        config: ResolverConfig | None = None,
        client: httpx.Client | None = None,
        heuristics: Sequence[PageHeuristic] | None = None,
    ) -> None:
        """Initialize the scraper.

        Args:
            config: Resolver configuration. Uses defaults if not provided.
            client: Optional shared HTTP client. When omitted, the scraper
                creates and owns one.
            heuristics: Structure heuristics tried in order when meta tags
                carry no title. Pass an empty sequence to disable them.
        """
        self._config = config or ResolverConfig()
        self._http_client = client
        self._owns_client = client is None
        self._heuristics = tuple(
            default_heuristics(self._config) if heuristics is None else heuristics
        )

    def _get_http_client(self) -> httpx.Client:
        if self._http_client is None:
            self._http_client = create_http_client(self._config.timeout)
        return self._http_client

    def close(self) -> None:
        """Close the HTTP client if this scraper created it."""
        if self._owns_client and self._http_client is not None:
            self._http_client.close()
            self._http_client = None

    def __enter__(self) -> PageMetadataScraper:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def fetch_page(self, link: str) -> str:
        """Fetch the raw page body.

        The status code is not checked: error pages are scraped like any
        other and usually come back empty.

        Raises:
            ReadError: If the body could not be read.
            TransportError: On any other network failure.
        """
        try:
            response = self._get_http_client().get(link)
        except (httpx.ReadError, httpx.DecodingError) as e:
            raise ReadError(f"Failed to read page body for {link}: {e}") from e
        except httpx.HTTPError as e:
            raise TransportError(f"Failed to fetch page {link}: {e}") from e
        logger.debug("Fetched %s (status %d)", link, response.status_code)
        return response.text

    def _run_heuristics(self, soup: BeautifulSoup) -> str | None:
        for heuristic in self._heuristics:
            try:
                text = heuristic.extract(soup)
            except Exception:
                logger.warning(
                    "Page heuristic %r failed", heuristic.name, exc_info=True
                )
                continue
            if text and text.strip():
                logger.debug("Page heuristic %r found %r", heuristic.name, text)
                return text
        return None

    def extract(self, body: str) -> MetadataFragment:
        """Run all extraction techniques over a page body.

        Returns:
            Fragment with raw combined ``title`` text and ``video_url``;
            possibly empty.
        """
        soup = BeautifulSoup(body, "html.parser")

        meta = extract_meta_tags(soup)
        title = meta.title
        video_url = meta.video_url

        if not title:
            title = self._run_heuristics(soup)
        if not video_url:
            video_url = find_watch_url(body)

        return MetadataFragment(title=title, video_url=video_url)

    def scrape(self, link: str) -> MetadataFragment:
        """Fetch and scrape a song link page.

        Raises:
            TransportError, ReadError: See fetch_page().
            ScrapeExhaustedError: If neither title text nor a video URL
                was found.
        """
        fragment = self.extract(self.fetch_page(link))
        if not fragment.title and not fragment.video_url:
            raise ScrapeExhaustedError(
                f"Could not extract any useful data from page {link}"
            )
        logger.debug(
            "Page result for %s: text=%r video_url=%r",
            link,
            fragment.title,
            fragment.video_url,
        )
        return fragment
