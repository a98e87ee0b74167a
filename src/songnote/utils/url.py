"""YouTube URL detection and normalization."""

import re
from urllib.parse import urlencode, urlsplit, urlunsplit

# Player iframe source in oEmbed markup, either /embed/ID or watch?v=ID
PLAYER_SRC_PATTERN = re.compile(
    r'src="([^"]*youtube\.com[^"]*(?:embed/|watch\?v=)[A-Za-z0-9_-]+[^"]*)"'
)

# Canonical watch or short link with an 11-character video ID
WATCH_URL_PATTERN = re.compile(
    r"https?://(?:www\.)?(?:youtube\.com/watch\?v=|youtu\.be/)[A-Za-z0-9_-]{11}"
)

_YOUTUBE_DOMAINS = ("youtube.com", "youtu.be")


def is_youtube_url(url: str | None) -> bool:
    """Check whether a URL references YouTube."""
    if not url:
        return False
    return any(domain in url for domain in _YOUTUBE_DOMAINS)


def find_player_url(markup: str | None) -> str | None:
    """Find the first YouTube player URL in embed markup.

    Args:
        markup: HTML snippet from an oEmbed ``html`` field.

    Returns:
        The raw ``src`` attribute value, or None if no YouTube player
        is referenced.
    """
    if not markup:
        return None
    if match := PLAYER_SRC_PATTERN.search(markup):
        return match.group(1)
    return None


def canonical_watch_url(url: str) -> str:
    """Rewrite an embed-path player URL into the watch-query form.

    Only the ``v`` query parameter is kept. URLs without ``/embed/``
    are returned unchanged.

    Example:
        >>> canonical_watch_url("https://www.youtube.com/embed/abc?autoplay=1")
        'https://www.youtube.com/watch?v=abc'
    """
    parts = urlsplit(url)
    prefix, sep, rest = parts.path.partition("/embed/")
    video_id = rest.split("/", 1)[0]
    if not sep or not video_id:
        return url
    return urlunsplit(
        (parts.scheme, parts.netloc, f"{prefix}/watch", urlencode({"v": video_id}), "")
    )


def find_watch_url(text: str | None) -> str | None:
    """Scan arbitrary text for the first canonical YouTube video URL."""
    if not text:
        return None
    if match := WATCH_URL_PATTERN.search(text):
        return match.group(0)
    return None
