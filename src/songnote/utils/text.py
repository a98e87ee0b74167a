"""String helpers shared by every resolution stage.

All functions are pure: no I/O and no exceptions beyond well-defined output
for empty input.
"""

import re

from pathvalidate import sanitize_filename

# Characters Telegram MarkdownV2 treats as markup outside of code entities
MARKDOWN_V2_SPECIAL = "_*[]()~`>#+-=|{}.!"

_MARKDOWN_V2_PATTERN = re.compile(f"([{re.escape(MARKDOWN_V2_SPECIAL)}])")
_LINK_TARGET_PATTERN = re.compile(r"([\\)])")

# Leading/trailing "-" separators plus the whitespace around them
_DASH_DEBRIS_PATTERN = re.compile(r"^(?:\s*-\s*)+|(?:\s*-\s*)+$")

# Separators that become underscores before the platform rules apply
_FILENAME_UNDERSCORED = str.maketrans(dict.fromkeys(" /\\", "_"))

# Leaves room for "_normalized.mp4" within the 255-byte name limit
FILE_STEM_MAX_LEN = 200


def split_on_first(text: str, separator: str) -> tuple[str, str] | None:
    """Split text on the first occurrence of separator.

    Args:
        text: Text to split.
        separator: Literal separator, e.g. " - " or " by ".

    Returns:
        (left, right) with both parts trimmed, or None if the separator
        is absent.

    Example:
        >>> split_on_first("A - B - C", " - ")
        ('A', 'B - C')
    """
    if not separator or separator not in text:
        return None
    left, right = text.split(separator, 1)
    return left.strip(), right.strip()


def strip_known_suffix(text: str, suffix: str) -> str:
    """Remove a trailing literal (case-sensitive) and trim the result."""
    return text.removesuffix(suffix).strip() if suffix else text.strip()


def strip_separator_artifacts(text: str, fragment: str) -> str:
    """Excise fragment from text and clean up the separator it leaves behind.

    Used when an artist name is embedded in a combined "Artist - Title"
    string and only the song title should remain.

    Args:
        text: Combined text, e.g. "Song X - Artist Y".
        fragment: Substring to remove, e.g. "Artist Y".

    Returns:
        The remaining text without leading/trailing dash debris. May be
        empty when text consisted only of the fragment.

    Example:
        >>> strip_separator_artifacts("Song X - Artist Y", "Artist Y")
        'Song X'
    """
    if not fragment:
        return text.strip()
    while fragment in text:
        text = text.replace(fragment, "")
    return _DASH_DEBRIS_PATTERN.sub("", text).strip()


def sanitize_for_filesystem(text: str) -> str:
    """Make text safe to use as a file name on any platform.

    Spaces and slashes become underscores, then pathvalidate drops
    invalid and control characters, renames reserved device names and
    truncates to FILE_STEM_MAX_LEN bytes. The result may be empty,
    callers must handle that case.

    Example:
        >>> sanitize_for_filesystem('AC/DC: "Live"')
        'AC_DC_Live'
    """
    text = text.translate(_FILENAME_UNDERSCORED)
    if not text:
        return ""
    return sanitize_filename(text, replacement_text="", max_len=FILE_STEM_MAX_LEN)


def escape_markdown_v2(text: str) -> str:
    """Escape Telegram MarkdownV2 special characters with a backslash."""
    return _MARKDOWN_V2_PATTERN.sub(r"\\\1", text)


def escape_link_target(url: str) -> str:
    """Escape the characters MarkdownV2 reserves inside a link target."""
    return _LINK_TARGET_PATTERN.sub(r"\\\1", url)
