"""High-level clip pipeline: resolve, download, cut, deliver."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from songnote.config import ClipConfig
from songnote.models.metadata import PresentationStrings, Resolution
from songnote.models.results import ClipResult
from songnote.services.fetcher import FetcherProtocol
from songnote.services.presentation import build_presentation, format_link_message
from songnote.services.processor import ProcessorProtocol
from songnote.services.resolver import MetadataResolver
from songnote.services.sender import SenderProtocol

logger = logging.getLogger(__name__)


class ClipPipeline:
    """Orchestrate a complete song link to video note run.

    Pipeline Overview:
    ==================
    1. Resolve metadata for the link (never fails, falls back to the link)
    2. Recreate the working directory
    3. Download the video (yt-dlp)
    4. Optionally normalize, then cut the square clip (ffmpeg)
    5. Send the link message, then the video note (Telegram)
    6. Remove the working directory unless asked to keep it

    Collaborator failures (download, ffmpeg, Telegram) propagate; the
    working directory is left in place for inspection in that case.
    """

    VIDEO_NOTE_SUFFIX = "_cut"

    def __init__(
        self,
        *,
        resolver: MetadataResolver,
        fetcher: FetcherProtocol,
        processor: ProcessorProtocol,
        sender: SenderProtocol,
        chat_id: str,
        work_dir: Path,
    ) -> None:
        self._resolver = resolver
        self._fetcher = fetcher
        self._processor = processor
        self._sender = sender
        self._chat_id = chat_id
        self._work_dir = work_dir

    def close(self) -> None:
        """Close the resolver and sender HTTP clients."""
        self._resolver.close()
        self._sender.close()

    def __enter__(self) -> ClipPipeline:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def _prepare_work_dir(self) -> None:
        logger.debug("Cleaning up working directory %s", self._work_dir)
        if self._work_dir.exists():
            shutil.rmtree(self._work_dir)
        self._work_dir.mkdir(parents=True, exist_ok=True)

    def _cleanup_work_dir(self) -> bool:
        try:
            shutil.rmtree(self._work_dir)
        except OSError as e:
            logger.warning(
                "Failed to remove working directory %s: %s", self._work_dir, e
            )
            return False
        logger.info("Removed working directory %s", self._work_dir)
        return True

    def _produce_clip(
        self,
        resolution: Resolution,
        presentation: PresentationStrings,
        clip: ClipConfig,
    ) -> tuple[Path, Path]:
        stem = presentation.file_stem
        source_path = self._fetcher.fetch(
            resolution.download_target, self._work_dir / f"{stem}.mp4"
        )
        cut_input = source_path
        if clip.normalize:
            cut_input = self._processor.normalize(
                source_path, self._work_dir / f"{stem}_normalized.mp4"
            )
        clip_path = self._processor.cut(
            cut_input, self._work_dir / f"{stem}{self.VIDEO_NOTE_SUFFIX}.mp4", clip
        )
        return source_path, clip_path

    def run(
        self,
        link: str,
        clip: ClipConfig,
        *,
        song_name: str | None = None,
        author_name: str | None = None,
    ) -> ClipResult:
        """Run the full pipeline for one link.

        Args:
            link: Song link supplied by the user.
            clip: Clip timing and delivery options.
            song_name: Optional title override (needs author_name).
            author_name: Optional artist override (needs song_name).

        Returns:
            ClipResult describing what was produced and sent.

        Raises:
            DownloadError, ProcessingError, SendError: From collaborators.
        """
        resolution = self._resolver.resolve(link)
        presentation = build_presentation(
            resolution.metadata,
            resolution.source_link,
            song_name=song_name,
            author_name=author_name,
        )
        message_text = format_link_message(presentation, resolution.source_link)

        self._prepare_work_dir()
        source_path, clip_path = self._produce_clip(resolution, presentation, clip)

        self._sender.send_message(self._chat_id, message_text)
        logger.info("Link message sent")
        self._sender.send_video_note(
            self._chat_id, clip_path, length=clip.size, duration=clip.duration
        )
        logger.info("Video note sent")

        cleaned_up = False
        if clip.keep_files:
            logger.info("Keeping temporary files in %s", self._work_dir)
        else:
            cleaned_up = self._cleanup_work_dir()

        return ClipResult(
            resolution=resolution,
            presentation=presentation,
            message_text=message_text,
            source_path=source_path,
            clip_path=clip_path,
            cleaned_up=cleaned_up,
        )
