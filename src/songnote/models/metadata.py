"""Song metadata models produced by the resolution pipeline."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator


def _trim_optional(v: str | None) -> str | None:
    if v is None:
        return None
    v = v.strip()
    return v or None


class MetadataFragment(BaseModel):
    """Partial result of a single extraction technique.

    Fields are trimmed on construction and blank strings become None,
    so "empty" always means None.

    Attributes:
        title: Song title, or raw combined text for page scraping.
        artist: Performing artist.
        video_url: Playable YouTube URL.
    """

    model_config = ConfigDict(frozen=True)

    title: str | None = None
    artist: str | None = None
    video_url: str | None = None

    @field_validator("title", "artist", "video_url", mode="before")
    @classmethod
    def trim(cls, v: str | None) -> str | None:
        """Trim whitespace and normalize blank strings to None."""
        return _trim_optional(v)

    @property
    def is_empty(self) -> bool:
        """True when no field carries data."""
        return not (self.title or self.artist or self.video_url)


class ResolvedMetadata(BaseModel):
    """Final merged (title, artist, video URL) triple."""

    model_config = ConfigDict(frozen=True)

    title: str | None = None
    artist: str | None = None
    video_url: str | None = None

    @field_validator("title", "artist", "video_url", mode="before")
    @classmethod
    def trim(cls, v: str | None) -> str | None:
        """Trim whitespace and normalize blank strings to None."""
        return _trim_optional(v)

    @property
    def needs_fallback(self) -> bool:
        """Whether the page scraper should run after the embed stage.

        True when the video URL is missing, or when both title and
        artist are missing.
        """
        return not self.video_url or not (self.title or self.artist)


class StageOutcome(BaseModel):
    """Diagnostic record of one resolution stage.

    Attributes:
        stage: Stage name ("embed" or "page").
        fragment: What the stage produced, None if it failed.
        error: Failure message, None on success.
    """

    model_config = ConfigDict(frozen=True)

    stage: str
    fragment: MetadataFragment | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        """True when the stage completed without error."""
        return self.error is None


class Resolution(BaseModel):
    """Outcome of resolving one source link.

    Attributes:
        source_link: The link that was resolved.
        metadata: Merged metadata, possibly empty.
        trace: One outcome per stage that ran, in execution order.
    """

    model_config = ConfigDict(frozen=True)

    source_link: str
    metadata: ResolvedMetadata
    trace: tuple[StageOutcome, ...] = ()

    @property
    def download_target(self) -> str:
        """URL handed to the downloader: the video URL or the source link."""
        return self.metadata.video_url or self.source_link


class PresentationStrings(BaseModel):
    """Derived strings for the link message and file names.

    Attributes:
        display_text: Label escaped for Telegram MarkdownV2.
        file_base_text: Unescaped, unquoted label.
        file_stem: file_base_text sanitized for the filesystem, or a
            generated name when nothing usable remains.
    """

    model_config = ConfigDict(frozen=True)

    display_text: str
    file_base_text: str
    file_stem: str
