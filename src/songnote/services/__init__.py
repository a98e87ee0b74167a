"""Business logic services for songnote.

Public API:
    MetadataResolver - Resolve a song link with embed and page fallbacks
    ClipPipeline - Full run: resolve + download + cut + send

Protocols (for dependency injection):
    EmbedResolverProtocol - oEmbed stage abstraction
    PageScraperProtocol - Page fallback stage abstraction
    PageHeuristic - Markup structure heuristic abstraction
    FetcherProtocol - Download backend abstraction
    ProcessorProtocol - Clip processing abstraction
    SenderProtocol - Message delivery abstraction

Internal (not exported):
    EmbedMetadataResolver, PageMetadataScraper - Default stages
    YTDLPFetcher - yt-dlp download backend
    FFmpegProcessor - ffmpeg clip backend
    TelegramSender - Telegram Bot API backend
"""

from songnote.services.pipeline import ClipPipeline
from songnote.services.resolver import MetadataResolver

__all__ = [
    "ClipPipeline",
    "MetadataResolver",
]
