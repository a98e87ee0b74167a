"""songnote - Turn song links into Telegram video notes.

This library resolves canonical song metadata (title, artist and a
playable YouTube URL) for music-sharing links through a chain of
fallbacks, then cuts a short square clip and posts it to Telegram.

Examples:
    Resolve metadata only:
    ```python
    from songnote import create_resolver

    with create_resolver() as resolver:
        resolution = resolver.resolve("https://song.link/s/...")
    print(resolution.metadata.title, resolution.metadata.artist)
    ```

    Full run:
    ```python
    from songnote import ClipConfig, create_pipeline, load_settings

    settings = load_settings()
    pipeline = create_pipeline(settings)
    result = pipeline.run(url, ClipConfig.create(start=42, duration=30))
    ```
"""

from songnote.config import ClipConfig, ResolverConfig
from songnote.exceptions import (
    ClipOptionsError,
    ConfigError,
    DecodeError,
    DownloadError,
    ProcessingError,
    ReadError,
    ResolutionError,
    ScrapeExhaustedError,
    SendError,
    SongNoteError,
    TransportError,
    UpstreamError,
)
from songnote.models import (
    ClipResult,
    MetadataFragment,
    PresentationStrings,
    Resolution,
    ResolvedMetadata,
    StageOutcome,
)
from songnote.services import ClipPipeline, MetadataResolver
from songnote.services.fetcher import YTDLPFetcher as _YTDLPFetcher
from songnote.services.presentation import build_presentation, format_link_message
from songnote.services.processor import FFmpegProcessor as _FFmpegProcessor
from songnote.services.processor import OutputCallback
from songnote.services.sender import TelegramSender as _TelegramSender
from songnote.settings import Settings, load_settings


def create_resolver(config: ResolverConfig | None = None) -> MetadataResolver:
    """Create a metadata resolver with the default embed and page stages.

    Args:
        config: Optional resolver configuration. Uses defaults if not provided.

    Returns:
        A MetadataResolver; use it as a context manager to release its
        HTTP client.
    """
    return MetadataResolver(config)


def create_pipeline(
    settings: Settings,
    *,
    use_test_channel: bool = False,
    resolver_config: ResolverConfig | None = None,
    on_ffmpeg_output: OutputCallback | None = None,
) -> ClipPipeline:
    """Create a fully wired clip pipeline from settings.

    Args:
        settings: Loaded application settings.
        use_test_channel: Post to chat_id_test instead of chat_id.
        resolver_config: Optional resolver configuration.
        on_ffmpeg_output: Optional sink for ffmpeg output lines.

    Returns:
        A configured ClipPipeline instance.

    Raises:
        ConfigError: If the test channel is requested but not configured.
    """
    resolver_config = resolver_config or ResolverConfig(timeout=settings.http_timeout)
    return ClipPipeline(
        resolver=MetadataResolver(resolver_config),
        fetcher=_YTDLPFetcher(cookies_path=settings.cookies_file),
        processor=_FFmpegProcessor(on_output=on_ffmpeg_output),
        sender=_TelegramSender(settings.bot_token.get_secret_value()),
        chat_id=settings.target_chat_id(use_test_channel),
        work_dir=settings.work_dir,
    )


__all__ = [
    "ClipConfig",
    "ClipOptionsError",
    "ClipPipeline",
    "ClipResult",
    "ConfigError",
    "DecodeError",
    "DownloadError",
    "MetadataFragment",
    "MetadataResolver",
    "PresentationStrings",
    "ProcessingError",
    "ReadError",
    "Resolution",
    "ResolutionError",
    "ResolvedMetadata",
    "ResolverConfig",
    "ScrapeExhaustedError",
    "SendError",
    "Settings",
    "SongNoteError",
    "StageOutcome",
    "TransportError",
    "UpstreamError",
    "build_presentation",
    "create_pipeline",
    "create_resolver",
    "format_link_message",
    "load_settings",
]
