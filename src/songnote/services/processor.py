"""Clip cutting service using ffmpeg."""

from __future__ import annotations

import logging
import shutil
import subprocess
from collections.abc import Callable
from pathlib import Path
from typing import Protocol

from songnote.config import ClipConfig
from songnote.exceptions import ProcessingError

logger = logging.getLogger(__name__)

OutputCallback = Callable[[str], None]


class ProcessorProtocol(Protocol):
    """Protocol for clip processing backends."""

    def cut(self, input_path: Path, output_path: Path, clip: ClipConfig) -> Path:
        """Cut a square clip from input_path into output_path."""
        ...

    def normalize(self, input_path: Path, output_path: Path) -> Path:
        """Re-encode input_path with regenerated timestamps."""
        ...


def build_filter_complex(clip: ClipConfig) -> str:
    """Build the ffmpeg filter graph for a square clip with audio fades.

    Video is trimmed, cropped to a centred square and scaled to the clip
    size. Audio is trimmed the same way and faded in and out.
    """
    fade_out_start = max(clip.duration - clip.fade, 0.0)
    video = (
        f"[0:v]trim=start={clip.start}:duration={clip.duration},"
        f"setpts=PTS-STARTPTS,crop=ih:ih,scale={clip.size}:{clip.size}[vout]"
    )
    audio = (
        f"[0:a]atrim=start={clip.start}:duration={clip.duration},"
        f"asetpts=PTS-STARTPTS,"
        f"afade=t=in:st=0:d={clip.fade:.2f},"
        f"afade=t=out:st={fade_out_start:.2f}:d={clip.fade:.2f}[aout]"
    )
    return f"{video};{audio}"


def build_cut_command(
    input_path: Path, output_path: Path, clip: ClipConfig
) -> list[str]:
    """Build the ffmpeg command producing a Telegram-compatible video note."""
    return [
        "ffmpeg",
        "-i", str(input_path),
        "-filter_complex", build_filter_complex(clip),
        "-map", "[vout]",
        "-map", "[aout]",
        "-c:v", "libx264",
        "-profile:v", "baseline",
        "-pix_fmt", "yuv420p",
        "-preset", "medium",
        "-c:a", "aac",
        "-b:a", "128k",
        "-movflags", "+faststart",
        "-y",
        str(output_path),
    ]  # fmt: skip


def build_normalize_command(input_path: Path, output_path: Path) -> list[str]:
    """Build the ffmpeg command that regenerates broken timestamps."""
    return [
        "ffmpeg",
        "-fflags", "+genpts",
        "-i", str(input_path),
        "-vf", "fps=30,setpts=PTS-STARTPTS",
        "-af", "asetpts=PTS-STARTPTS",
        "-ar", "44100",
        "-preset", "ultrafast",
        "-y",
        str(output_path),
    ]  # fmt: skip


def _log_output(line: str) -> None:
    logger.debug("ffmpeg: %s", line)


class FFmpegProcessor:
    """Cut and re-encode clips with ffmpeg.

    ffmpeg output is consumed incrementally and handed to a callback
    line by line, including carriage-return progress updates.

    Example:
        >>> processor = FFmpegProcessor()
        >>> processor.cut(Path("song.mp4"), Path("song_cut.mp4"), clip)
    """

    def __init__(self, on_output: OutputCallback | None = None) -> None:
        """Initialize the processor.

        Args:
            on_output: Receives each ffmpeg output line. Defaults to
                debug logging.
        """
        self._on_output = on_output or _log_output

    def is_available(self) -> bool:
        """Check if ffmpeg is available in PATH."""
        return shutil.which("ffmpeg") is not None

    def _run(self, cmd: list[str]) -> None:
        if not self.is_available():
            raise ProcessingError("ffmpeg not found in PATH")

        logger.debug("Running %s", " ".join(cmd))
        try:
            # Text mode splits on "\r" too, so progress updates arrive as lines
            with subprocess.Popen(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                errors="replace",
            ) as proc:
                if proc.stdout is None:
                    raise ProcessingError("ffmpeg output pipe is not available")
                for line in proc.stdout:
                    if line := line.rstrip():
                        self._on_output(line)
                returncode = proc.wait()
        except OSError as e:
            raise ProcessingError(f"Failed to run ffmpeg: {e}") from e

        if returncode != 0:
            raise ProcessingError(
                f"ffmpeg failed with exit code {returncode}", returncode=returncode
            )

    def cut(self, input_path: Path, output_path: Path, clip: ClipConfig) -> Path:
        """Cut a square clip with faded audio.

        Raises:
            ProcessingError: If ffmpeg is missing or fails.
        """
        logger.info(
            "Cutting %ds from %ds of %s", clip.duration, clip.start, input_path.name
        )
        output_path.parent.mkdir(parents=True, exist_ok=True)
        self._run(build_cut_command(input_path, output_path, clip))
        return output_path

    def normalize(self, input_path: Path, output_path: Path) -> Path:
        """Re-encode a video with regenerated timestamps at 30 fps.

        Fixes sources whose timestamps make trimming drift.

        Raises:
            ProcessingError: If ffmpeg is missing or fails.
        """
        logger.info("Normalizing %s", input_path.name)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        self._run(build_normalize_command(input_path, output_path))
        return output_path
