"""Pipeline result models."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict

from songnote.models.metadata import PresentationStrings, Resolution


class ClipResult(BaseModel):
    """Result of a complete clip run.

    Attributes:
        resolution: Metadata resolution outcome.
        presentation: Strings used for the message and file names.
        message_text: MarkdownV2 link message that was sent.
        source_path: Downloaded video (may be removed after cleanup).
        clip_path: Cut clip (may be removed after cleanup).
        cleaned_up: Whether the working directory was removed.
    """

    model_config = ConfigDict(frozen=True)

    resolution: Resolution
    presentation: PresentationStrings
    message_text: str
    source_path: Path
    clip_path: Path
    cleaned_up: bool = False
