"""Configuration for songnote."""

import logging
from dataclasses import dataclass

from songnote.exceptions import ClipOptionsError

logger = logging.getLogger(__name__)

MIN_CLIP_SECONDS = 10
MAX_CLIP_SECONDS = 60


@dataclass(frozen=True)
class ResolverConfig:
    """Metadata resolution configuration.

    Attributes:
        oembed_endpoint: Structured metadata endpoint queried first.
        timeout: Per-request timeout in seconds.
        excluded_authors: oEmbed author names that are platform brands,
            never artists (compared case-insensitively).
        channel_marker: Substring marking an auto-generated artist channel.
        channel_suffix: Trailing label stripped from derived artist names.
        block_class: Style-class fragment of the song info container.
        title_class: Style-class fragment of the title block.
        artist_class: Style-class fragment of the artist block.
    """

    oembed_endpoint: str = "https://song.link/oembed"
    timeout: float = 15.0
    excluded_authors: frozenset[str] = frozenset({"youtube", "soundcloud", "spotify"})
    channel_marker: str = "Topic"
    channel_suffix: str = " - Topic"
    block_class: str = "e12n0mv62"
    title_class: str = "e12n0mv61"
    artist_class: str = "e12n0mv60"


@dataclass(frozen=True)
class ClipConfig:
    """Clip cutting and delivery configuration.

    Attributes:
        start: Clip start offset in seconds.
        duration: Clip length in seconds.
        fade: Audio fade-in/fade-out length in seconds.
        size: Edge length of the square output video in pixels.
        keep_files: Keep the working directory after the run.
        normalize: Re-time the source video before cutting.
    """

    start: int
    duration: int
    fade: float = 1.0
    size: int = 400
    keep_files: bool = False
    normalize: bool = False

    @classmethod
    def create(
        cls,
        start: int,
        duration: int,
        *,
        keep_files: bool = False,
        normalize: bool = False,
    ) -> "ClipConfig":
        """Validate user-supplied timing and build a config.

        Durations below the minimum are rejected; durations above the
        video note limit are clamped with a warning.

        Raises:
            ClipOptionsError: If start is negative or duration too short.
        """
        if start < 0:
            raise ClipOptionsError(f"Start time must be non-negative, got {start}")
        if duration < MIN_CLIP_SECONDS:
            raise ClipOptionsError(
                f"Min duration is {MIN_CLIP_SECONDS} seconds, got {duration}"
            )
        if duration > MAX_CLIP_SECONDS:
            logger.warning(
                "Requested duration %d seconds is greater than %d, clamping",
                duration,
                MAX_CLIP_SECONDS,
            )
            duration = MAX_CLIP_SECONDS
        return cls(
            start=start, duration=duration, keep_files=keep_files, normalize=normalize
        )
