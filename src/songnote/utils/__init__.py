"""Utility functions for songnote.

Available via `from songnote.utils import ...` for power users.
Not re-exported at the top-level `songnote` package.
"""

from songnote.utils.text import (
    escape_link_target,
    escape_markdown_v2,
    sanitize_for_filesystem,
    split_on_first,
    strip_known_suffix,
    strip_separator_artifacts,
)
from songnote.utils.url import (
    canonical_watch_url,
    find_player_url,
    find_watch_url,
    is_youtube_url,
)

__all__ = [
    "canonical_watch_url",
    "escape_link_target",
    "escape_markdown_v2",
    "find_player_url",
    "find_watch_url",
    "is_youtube_url",
    "sanitize_for_filesystem",
    "split_on_first",
    "strip_known_suffix",
    "strip_separator_artifacts",
]
