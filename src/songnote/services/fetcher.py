"""Video download service using yt-dlp."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Protocol

import yt_dlp

from songnote.exceptions import DownloadError

logger = logging.getLogger(__name__)


class FetcherProtocol(Protocol):
    """Protocol for download backends.

    This protocol enables dependency injection and testing.
    """

    def fetch(self, url: str, output_path: Path) -> Path:
        """Download a video to the specified path.

        Returns:
            Actual path where the file was saved.
        """
        ...


class YTDLPFetcher:
    """yt-dlp based downloader for source videos.

    Downloads the best video and audio streams and merges them into an
    mp4 container. Any URL yt-dlp understands works, which is how a bare
    song link is handled when no YouTube URL could be resolved.
    """

    FORMAT = "bestvideo+bestaudio/best"
    MERGE_FORMAT = "mp4"

    def __init__(self, cookies_path: Path | None = None, quiet: bool = False) -> None:
        """Initialize the fetcher.

        Args:
            cookies_path: Optional cookies.txt, used only if it exists.
                Needed for age-restricted or region-gated videos.
            quiet: Suppress yt-dlp console output.
        """
        self._cookies_path = cookies_path
        self._quiet = quiet

        if self._has_cookies:
            logger.info("Using cookies for yt-dlp downloads")
        else:
            logger.debug("No cookies configured for yt-dlp downloads")

    @property
    def _has_cookies(self) -> bool:
        return bool(self._cookies_path and self._cookies_path.exists())

    def build_options(self, output_path: Path) -> dict[str, Any]:
        """Build yt-dlp options for a merged mp4 download."""
        opts: dict[str, Any] = {
            "format": self.FORMAT,
            "merge_output_format": self.MERGE_FORMAT,
            "outtmpl": str(output_path),
            "color": "never",  # Disable ANSI codes in error messages
            "quiet": self._quiet,
            "no_warnings": self._quiet,
            "noprogress": self._quiet,
        }
        if self._has_cookies:
            opts["cookiefile"] = str(self._cookies_path)
        return opts

    def fetch(self, url: str, output_path: Path) -> Path:
        """Download a video and merge it to mp4.

        Args:
            url: Video URL (or any page yt-dlp can extract from).
            output_path: Target file path, including the .mp4 extension.

        Returns:
            Actual path of the merged file.

        Raises:
            DownloadError: If yt-dlp fails.
        """
        output_path.parent.mkdir(parents=True, exist_ok=True)
        opts = self.build_options(output_path)

        actual_path: Path | None = None

        def capture_final_path(d: dict[str, Any]) -> None:
            """Capture the output path once post-processing (merge) finishes."""
            nonlocal actual_path
            if d["status"] == "finished":
                filepath = d.get("info_dict", {}).get("filepath")
                if filepath:
                    actual_path = Path(filepath)

        opts["postprocessor_hooks"] = [capture_final_path]

        logger.info("Downloading video from %s", url)
        try:
            with yt_dlp.YoutubeDL(opts) as ydl:
                retcode = ydl.download([url])
        except (KeyboardInterrupt, SystemExit):
            raise
        except Exception as e:
            error_msg = str(e)
            if "Sign in" in error_msg or "cookies" in error_msg.lower():
                raise DownloadError(
                    f"Authentication required for {url}. "
                    "Try providing a cookies file."
                ) from e
            if "Video unavailable" in error_msg:
                raise DownloadError(
                    f"Video {url} is unavailable (may be region-locked or removed)"
                ) from e
            raise DownloadError(f"Failed to download {url}: {e}") from e

        if retcode:
            raise DownloadError(f"yt-dlp exited with code {retcode} for {url}")

        path = actual_path or output_path
        if not path.exists():
            raise DownloadError(f"Download finished but {path} does not exist")
        logger.debug("Downloaded %s to %s", url, path)
        return path
