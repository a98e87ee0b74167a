"""Tests for the oEmbed resolution stage."""

from collections.abc import Callable

import httpx
import pytest
from songnote.config import ResolverConfig
from songnote.exceptions import DecodeError, TransportError, UpstreamError
from songnote.services.embed import (
    EmbedMetadataResolver,
    extract_embed_video_url,
    parse_oembed_payload,
    split_embed_title,
)

LINK = "https://song.link/s/4uLU6hMCjMI75M1A2tKUQC"
WATCH_URL = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"


class TestSplitEmbedTitle:
    """Tests for title/artist derivation from oEmbed fields."""

    @pytest.mark.parametrize(
        ("title", "author", "expected"),
        [
            ("Song X - Artist Y", "Artist Y", ("Song X", "Artist Y")),
            ("Artist Y - Song X", "Artist Y", ("Song X", "Artist Y")),
            ("Cool Track", "SomeChannel - Topic", ("Cool Track", "SomeChannel")),
            (
                "SomeChannel - Cool Track",
                "SomeChannel - Topic",
                ("Cool Track", "SomeChannel"),
            ),
            ("Artist - Track", "YouTube", ("Track", "Artist")),
            ("Artist - Track", "spotify", ("Track", "Artist")),
            ("Artist - Track", "Topic", ("Track", "Artist")),
            ("Artist - Track", "YouTube - Topic", ("Track", "Artist")),
            ("A - B - C", "", ("B - C", "A")),
            ("Just A Title", "", ("Just A Title", None)),
            ("Artist Y", "Artist Y", ("Artist Y", "Artist Y")),
            ("", "Artist Y", (None, "Artist Y")),
            ("", "", (None, None)),
        ],
        ids=[
            "author_trailing",
            "author_leading",
            "topic_channel",
            "topic_channel_in_title",
            "excluded_brand",
            "excluded_brand_case_insensitive",
            "bare_marker",
            "excluded_brand_topic_channel",
            "dash_split_first_only",
            "title_only",
            "title_is_artist",
            "artist_only",
            "empty",
        ],
    )
    def test_split_embed_title(
        self,
        resolver_config: ResolverConfig,
        title: str,
        author: str,
        expected: tuple[str | None, str | None],
    ) -> None:
        """Should derive (title, artist) per the author trust rules."""
        assert split_embed_title(title, author, resolver_config) == expected

    def test_title_never_contains_trusted_artist(
        self, resolver_config: ResolverConfig
    ) -> None:
        """Should excise every occurrence of the trusted artist."""
        title, artist = split_embed_title(
            "Band - Song (Band Remix)", "Band", resolver_config
        )
        assert artist == "Band"
        assert title is not None
        assert "Band" not in title


class TestExtractEmbedVideoUrl:
    """Tests for video URL extraction from oEmbed payloads."""

    def test_player_markup_is_canonicalized(
        self, sample_oembed_payload: dict[str, str]
    ) -> None:
        """Should rewrite the embed player src to the watch form."""
        assert extract_embed_video_url(sample_oembed_payload) == WATCH_URL

    def test_markup_beats_provider_url(self) -> None:
        """Should prefer the player markup over the provider URL."""
        payload = {
            "provider_url": "https://www.youtube.com/watch?v=9bZkp7q19f0",
            "html": f'<iframe src="{WATCH_URL}"></iframe>',
        }
        assert extract_embed_video_url(payload) == WATCH_URL

    def test_youtube_provider_url_fallback(self) -> None:
        """Should use a YouTube provider URL when markup has no player."""
        payload = {"provider_url": "https://www.youtube.com/", "html": "<div></div>"}
        assert extract_embed_video_url(payload) == "https://www.youtube.com/"

    def test_other_provider_url_ignored(self) -> None:
        """Should ignore provider URLs on other platforms."""
        payload = {"provider_url": "https://song.link", "html": ""}
        assert extract_embed_video_url(payload) is None


class TestParseOembedPayload:
    """Tests for parse_oembed_payload."""

    def test_full_payload(self, sample_oembed_payload: dict[str, str]) -> None:
        """Should produce title, artist and a canonical watch URL."""
        fragment = parse_oembed_payload(sample_oembed_payload)

        assert fragment.title == "Song X"
        assert fragment.artist == "Artist Y"
        assert fragment.video_url == WATCH_URL

    def test_empty_payload_is_not_an_error(self) -> None:
        """Should return an empty fragment for an empty payload."""
        assert parse_oembed_payload({}).is_empty

    def test_non_string_fields_ignored(self) -> None:
        """Should treat non-string fields as absent."""
        fragment = parse_oembed_payload({"title": 123, "author_name": None})
        assert fragment.is_empty

    def test_fields_are_trimmed(self) -> None:
        """Should trim raw title and author before use."""
        fragment = parse_oembed_payload(
            {"title": "  Song X - Artist Y  ", "author_name": " Artist Y "}
        )
        assert fragment.title == "Song X"
        assert fragment.artist == "Artist Y"


class TestEmbedMetadataResolver:
    """Tests for EmbedMetadataResolver over a mock transport."""

    def test_resolve_success(
        self,
        make_client: Callable[..., httpx.Client],
        sample_oembed_payload: dict[str, str],
    ) -> None:
        """Should query the endpoint with url and format parameters."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=sample_oembed_payload)

        resolver = EmbedMetadataResolver(client=make_client(handler))
        fragment = resolver.resolve(LINK)

        assert fragment.title == "Song X"
        assert fragment.artist == "Artist Y"
        assert fragment.video_url == WATCH_URL
        request = seen[0]
        assert request.url.host == "song.link"
        assert request.url.path == "/oembed"
        assert request.url.params["url"] == LINK
        assert request.url.params["format"] == "json"

    def test_custom_endpoint(self, make_client: Callable[..., httpx.Client]) -> None:
        """Should use the configured endpoint."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={})

        config = ResolverConfig(oembed_endpoint="https://example.test/api/oembed")
        EmbedMetadataResolver(config, client=make_client(handler)).resolve(LINK)

        assert seen[0].url.host == "example.test"

    def test_transport_error(self, make_client: Callable[..., httpx.Client]) -> None:
        """Should raise TransportError on network failure."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        resolver = EmbedMetadataResolver(client=make_client(handler))
        with pytest.raises(TransportError):
            resolver.resolve(LINK)

    def test_upstream_error_carries_status_and_body(
        self, make_client: Callable[..., httpx.Client]
    ) -> None:
        """Should raise UpstreamError with status and body on non-200."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, text="Not Found")

        resolver = EmbedMetadataResolver(client=make_client(handler))
        with pytest.raises(UpstreamError) as exc_info:
            resolver.resolve(LINK)

        assert exc_info.value.upstream_status == 404
        assert exc_info.value.body == "Not Found"

    @pytest.mark.parametrize(
        "response",
        [
            httpx.Response(200, text="<html>not json</html>"),
            httpx.Response(200, json=["not", "an", "object"]),
        ],
        ids=["malformed", "not_an_object"],
    )
    def test_decode_error(
        self, make_client: Callable[..., httpx.Client], response: httpx.Response
    ) -> None:
        """Should raise DecodeError when the body is not a JSON object."""

        def handler(request: httpx.Request) -> httpx.Response:
            return response

        resolver = EmbedMetadataResolver(client=make_client(handler))
        with pytest.raises(DecodeError):
            resolver.resolve(LINK)

    def test_shared_client_not_closed(
        self, make_client: Callable[..., httpx.Client]
    ) -> None:
        """Should leave a caller-provided client open."""
        client = make_client(lambda request: httpx.Response(200, json={}))

        with EmbedMetadataResolver(client=client) as resolver:
            resolver.resolve(LINK)

        assert not client.is_closed

    def test_resolve_logs_result(
        self,
        make_client: Callable[..., httpx.Client],
        sample_oembed_payload: dict[str, str],
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """Should log the derived fields at debug level."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=sample_oembed_payload)

        with caplog.at_level("DEBUG", logger="songnote.services.embed"):
            EmbedMetadataResolver(client=make_client(handler)).resolve(LINK)

        assert "Artist Y" in caplog.text
