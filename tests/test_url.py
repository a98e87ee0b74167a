"""Tests for URL utilities."""

import pytest
from songnote.utils.url import (
    canonical_watch_url,
    find_player_url,
    find_watch_url,
    is_youtube_url,
)


class TestIsYoutubeUrl:
    """Tests for is_youtube_url."""

    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("https://www.youtube.com/watch?v=dQw4w9WgXcQ", True),
            ("https://music.youtube.com/watch?v=dQw4w9WgXcQ", True),
            ("https://youtu.be/dQw4w9WgXcQ", True),
            ("https://open.spotify.com/track/abc", False),
            ("", False),
            (None, False),
        ],
        ids=["www", "music", "short", "spotify", "empty", "none"],
    )
    def test_is_youtube_url(self, url: str | None, expected: bool) -> None:
        """Should detect YouTube domains."""
        assert is_youtube_url(url) is expected


class TestFindPlayerUrl:
    """Tests for find_player_url."""

    def test_finds_embed_src(self) -> None:
        """Should return the src of a YouTube embed iframe."""
        markup = (
            '<iframe width="200" '
            'src="https://www.youtube.com/embed/dQw4w9WgXcQ?feature=oembed" '
            'frameborder="0"></iframe>'
        )
        assert (
            find_player_url(markup)
            == "https://www.youtube.com/embed/dQw4w9WgXcQ?feature=oembed"
        )

    def test_finds_watch_src(self) -> None:
        """Should accept the watch-query form as well."""
        markup = '<iframe src="https://www.youtube.com/watch?v=dQw4w9WgXcQ"></iframe>'
        assert find_player_url(markup) == "https://www.youtube.com/watch?v=dQw4w9WgXcQ"

    @pytest.mark.parametrize(
        "markup",
        [
            '<iframe src="https://open.spotify.com/embed/track/abc"></iframe>',
            '<iframe src="https://www.youtube.com/"></iframe>',
            "",
            None,
        ],
        ids=["other_platform", "no_video_marker", "empty", "none"],
    )
    def test_no_player(self, markup: str | None) -> None:
        """Should return None without a YouTube player reference."""
        assert find_player_url(markup) is None


class TestCanonicalWatchUrl:
    """Tests for canonical_watch_url."""

    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            (
                "https://www.youtube.com/embed/dQw4w9WgXcQ?feature=oembed",
                "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
            ),
            (
                "https://www.youtube.com/embed/dQw4w9WgXcQ?autoplay=1&start=5",
                "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
            ),
            (
                "https://www.youtube.com/embed/dQw4w9WgXcQ",
                "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
            ),
        ],
        ids=["oembed_feature", "extra_params", "no_query"],
    )
    def test_rewrites_embed_form(self, url: str, expected: str) -> None:
        """Should keep only the video ID parameter."""
        assert canonical_watch_url(url) == expected

    @pytest.mark.parametrize(
        "url",
        [
            "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
            "https://www.youtube.com/embed/",
            "https://youtu.be/dQw4w9WgXcQ",
        ],
        ids=["already_watch", "missing_id", "short_link"],
    )
    def test_other_urls_unchanged(self, url: str) -> None:
        """Should return non-embed URLs as given."""
        assert canonical_watch_url(url) == url


class TestFindWatchUrl:
    """Tests for find_watch_url."""

    def test_finds_first_watch_url(self) -> None:
        """Should return the first canonical URL in arbitrary text."""
        text = (
            '{"links":["https://www.youtube.com/watch?v=dQw4w9WgXcQ&t=1",'
            '"https://www.youtube.com/watch?v=9bZkp7q19f0"]}'
        )
        assert find_watch_url(text) == "https://www.youtube.com/watch?v=dQw4w9WgXcQ"

    def test_finds_short_link(self) -> None:
        """Should match youtu.be short links."""
        assert find_watch_url("see https://youtu.be/dQw4w9WgXcQ") == (
            "https://youtu.be/dQw4w9WgXcQ"
        )

    def test_requires_eleven_character_id(self) -> None:
        """Should ignore IDs shorter than 11 characters."""
        assert find_watch_url("https://www.youtube.com/watch?v=short12345") is None

    def test_nothing_found(self) -> None:
        """Should return None for empty or unrelated text."""
        assert find_watch_url("") is None
        assert find_watch_url("<html>no video here</html>") is None
