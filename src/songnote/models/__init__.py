"""Data models for songnote."""

from songnote.models.metadata import (
    MetadataFragment,
    PresentationStrings,
    Resolution,
    ResolvedMetadata,
    StageOutcome,
)
from songnote.models.results import ClipResult

__all__ = [
    "ClipResult",
    "MetadataFragment",
    "PresentationStrings",
    "Resolution",
    "ResolvedMetadata",
    "StageOutcome",
]
