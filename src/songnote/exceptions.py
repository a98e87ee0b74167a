"""Custom exceptions for songnote.

All exceptions include an HTTP status_code attribute, mirroring how the
error would surface if the pipeline were exposed behind a web API.
"""


class SongNoteError(Exception):
    """Base exception for songnote.

    Attributes:
        status_code: HTTP status code for API error responses.
    """

    status_code: int = 500

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


# ============================================================================
# RESOLUTION ERRORS - absorbed by the resolver, never fatal for a run
# ============================================================================


class ResolutionError(SongNoteError):
    """A metadata resolution stage failed to produce data."""

    status_code: int = 502  # Bad Gateway (upstream failure)


class TransportError(ResolutionError):
    """Network or connection failure while talking to a metadata source."""


class UpstreamError(ResolutionError):
    """Metadata source answered with a non-success HTTP status.

    Attributes:
        upstream_status: Status code returned by the upstream service.
        body: Raw response body, kept for diagnostics.
    """

    def __init__(self, message: str, upstream_status: int, body: str = "") -> None:
        super().__init__(message)
        self.upstream_status = upstream_status
        self.body = body


class DecodeError(ResolutionError):
    """Structured response body could not be decoded."""


class ReadError(ResolutionError):
    """Response body could not be read."""


class ScrapeExhaustedError(ResolutionError):
    """Every page scraping technique came back empty."""

    status_code: int = 404  # Not Found


# ============================================================================
# COLLABORATOR ERRORS - propagate to the caller
# ============================================================================


class ConfigError(SongNoteError):
    """Configuration is missing or invalid."""


class ClipOptionsError(SongNoteError):
    """Requested clip parameters are out of range."""

    status_code: int = 400  # Bad Request


class DownloadError(SongNoteError):
    """Failed to download the source video.

    Raised when yt-dlp fails to fetch or merge the video.
    """


class ProcessingError(SongNoteError):
    """ffmpeg failed to produce the clip.

    Attributes:
        returncode: Exit status of ffmpeg, or None if it never ran.
    """

    def __init__(self, message: str, returncode: int | None = None) -> None:
        super().__init__(message)
        self.returncode = returncode


class SendError(SongNoteError):
    """Telegram Bot API request failed.

    Attributes:
        upstream_status: HTTP status returned by Telegram, or None on
            transport failure.
        body: Raw response body.
    """

    status_code: int = 502  # Bad Gateway (upstream failure)

    def __init__(
        self, message: str, upstream_status: int | None = None, body: str = ""
    ) -> None:
        super().__init__(message)
        self.upstream_status = upstream_status
        self.body = body
