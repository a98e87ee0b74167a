"""Tests for the yt-dlp fetcher."""

from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest
from songnote.exceptions import DownloadError
from songnote.services.fetcher import YTDLPFetcher

WATCH_URL = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"


class TestBuildOptions:
    """Tests for yt-dlp option construction."""

    def test_default_options(self, tmp_path: Path) -> None:
        """Should request a merged mp4 at the given path."""
        output_path = tmp_path / "song.mp4"
        opts = YTDLPFetcher().build_options(output_path)

        assert opts["format"] == "bestvideo+bestaudio/best"
        assert opts["merge_output_format"] == "mp4"
        assert opts["outtmpl"] == str(output_path)
        assert "cookiefile" not in opts

    def test_cookies_used_when_present(self, tmp_path: Path) -> None:
        """Should pass an existing cookies file to yt-dlp."""
        cookies = tmp_path / "cookies.txt"
        cookies.write_text("# Netscape HTTP Cookie File\n")

        opts = YTDLPFetcher(cookies_path=cookies).build_options(tmp_path / "a.mp4")

        assert opts["cookiefile"] == str(cookies)

    def test_missing_cookies_ignored(self, tmp_path: Path) -> None:
        """Should skip a cookies path that does not exist."""
        fetcher = YTDLPFetcher(cookies_path=tmp_path / "missing.txt")
        assert "cookiefile" not in fetcher.build_options(tmp_path / "a.mp4")

    def test_quiet(self, tmp_path: Path) -> None:
        """Should silence yt-dlp output when quiet."""
        opts = YTDLPFetcher(quiet=True).build_options(tmp_path / "a.mp4")
        assert opts["quiet"] is True
        assert opts["noprogress"] is True


class TestFetch:
    """Tests for YTDLPFetcher.fetch."""

    def test_fetch_returns_output_path(self, tmp_path: Path) -> None:
        """Should return the output path once the file exists."""
        output_path = tmp_path / "work" / "song.mp4"

        def mock_download(urls: list[str]) -> int:
            output_path.touch()
            return 0

        with patch("yt_dlp.YoutubeDL") as mock_ydl:
            mock_instance = mock_ydl.return_value.__enter__.return_value
            mock_instance.download = mock_download

            result = YTDLPFetcher().fetch(WATCH_URL, output_path)

        assert result == output_path

    def test_fetch_prefers_postprocessor_path(self, tmp_path: Path) -> None:
        """Should return the merged file path reported by yt-dlp."""
        output_path = tmp_path / "song.mp4"
        merged_path = tmp_path / "song.merged.mp4"

        with patch("yt_dlp.YoutubeDL") as mock_ydl:

            def mock_download(urls: list[str]) -> int:
                opts: dict[str, Any] = mock_ydl.call_args.args[0]
                merged_path.touch()
                for hook in opts["postprocessor_hooks"]:
                    hook({"status": "started", "info_dict": {}})
                    hook(
                        {
                            "status": "finished",
                            "info_dict": {"filepath": str(merged_path)},
                        }
                    )
                return 0

            mock_instance = mock_ydl.return_value.__enter__.return_value
            mock_instance.download = mock_download

            result = YTDLPFetcher().fetch(WATCH_URL, output_path)

        assert result == merged_path

    def test_fetch_passes_url(self, tmp_path: Path) -> None:
        """Should hand the URL to yt-dlp unchanged."""
        output_path = tmp_path / "song.mp4"
        seen: list[list[str]] = []

        def mock_download(urls: list[str]) -> int:
            seen.append(urls)
            output_path.touch()
            return 0

        with patch("yt_dlp.YoutubeDL") as mock_ydl:
            mock_ydl.return_value.__enter__.return_value.download = mock_download
            YTDLPFetcher().fetch("https://song.link/s/abc", output_path)

        assert seen == [["https://song.link/s/abc"]]

    @pytest.mark.parametrize(
        ("message", "expected"),
        [
            ("ERROR: Sign in to confirm your age", "Authentication required"),
            ("ERROR: Video unavailable", "unavailable"),
            ("ERROR: Unsupported URL", "Failed to download"),
        ],
        ids=["auth", "unavailable", "generic"],
    )
    def test_fetch_errors(self, tmp_path: Path, message: str, expected: str) -> None:
        """Should map yt-dlp failures to DownloadError."""

        def mock_download(urls: list[str]) -> int:
            raise Exception(message)

        with patch("yt_dlp.YoutubeDL") as mock_ydl:
            mock_ydl.return_value.__enter__.return_value.download = mock_download
            with pytest.raises(DownloadError) as exc_info:
                YTDLPFetcher().fetch(WATCH_URL, tmp_path / "song.mp4")

        assert expected in str(exc_info.value)

    def test_nonzero_retcode(self, tmp_path: Path) -> None:
        """Should fail when yt-dlp reports a non-zero exit code."""
        with patch("yt_dlp.YoutubeDL") as mock_ydl:
            mock_ydl.return_value.__enter__.return_value.download.return_value = 1
            with pytest.raises(DownloadError, match="exited with code 1"):
                YTDLPFetcher().fetch(WATCH_URL, tmp_path / "song.mp4")

    def test_missing_file(self, tmp_path: Path) -> None:
        """Should fail when no file was produced."""
        with patch("yt_dlp.YoutubeDL") as mock_ydl:
            mock_ydl.return_value.__enter__.return_value.download.return_value = 0
            with pytest.raises(DownloadError, match="does not exist"):
                YTDLPFetcher().fetch(WATCH_URL, tmp_path / "song.mp4")
