"""Display label and file name derivation for resolved songs."""

import logging
import secrets
import time
from collections.abc import Callable

from songnote.models.metadata import PresentationStrings, ResolvedMetadata
from songnote.utils.text import (
    escape_link_target,
    escape_markdown_v2,
    sanitize_for_filesystem,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], float]

# Sanitized names that carry no information
_FILLER_STEMS = frozenset({"", "_"})


def generated_name(clock: Clock = time.time, suffix: str = "") -> str:
    """Build a unique timestamp-based name like ``track_1718000000_3fa9c1``.

    A random tail keeps two runs within the same second apart.
    """
    name = f"track_{int(clock())}_{secrets.token_hex(3)}"
    return f"{name}_{suffix}" if suffix else name


def _compose(
    title: str | None, artist: str | None
) -> tuple[str, str] | None:
    """Return (display label, file label) or None when nothing is known."""
    if title and artist:
        return f'"{title}" by {artist}', f"{title} by {artist}"
    if title:
        return f'"{title}"', title
    if artist:
        return f"Unknown Song by {artist}", artist
    return None


def build_presentation(
    metadata: ResolvedMetadata,
    source_link: str,
    song_name: str | None = None,
    author_name: str | None = None,
    clock: Clock = time.time,
) -> PresentationStrings:
    """Derive the link label and file names for a resolved song.

    Args:
        metadata: Resolved metadata.
        source_link: Link the user supplied; shown when nothing is known.
        song_name: Override title, used only together with author_name.
        author_name: Override artist, used only together with song_name.
        clock: Time source for generated names.

    Returns:
        Presentation strings. display_text is escaped for MarkdownV2.
    """
    song_name = (song_name or "").strip()
    author_name = (author_name or "").strip()

    if song_name and author_name:
        composed = _compose(song_name, author_name)
        logger.info("Using custom names: %r by %r", song_name, author_name)
    else:
        composed = _compose(metadata.title, metadata.artist)

    if composed:
        display_label, file_base_text = composed
        display_text = escape_markdown_v2(display_label)
    else:
        logger.warning(
            "No usable title or artist found for %s, using a generic name",
            source_link,
        )
        file_base_text = generated_name(clock)
        display_text = escape_markdown_v2(source_link)

    file_stem = sanitize_for_filesystem(file_base_text)
    if file_stem in _FILLER_STEMS:
        file_stem = generated_name(clock, suffix="fallback")

    return PresentationStrings(
        display_text=display_text,
        file_base_text=file_base_text,
        file_stem=file_stem,
    )


def format_link_message(presentation: PresentationStrings, link: str) -> str:
    """Build the MarkdownV2 inline link ``[label](link)``."""
    return f"[{presentation.display_text}]({escape_link_target(link)})"
