"""
Collection pipeline: fetch, parse, merge and persist remote video listings
"""
from .client import RemoteFetchClient, build_api_url, build_query_url, with_page
from .playlist import Episode, PlaySource, parse_play_urls
from .schemas import RemoteCategory, SourceConfig, VodEntry, VodListResponse, parse_entry, parse_list_response
from .merger import CatalogWriter, MergeResult, VideoMerger, merge_play_sources, strip_play_source
from .page import PageCollector, PageResult
from .batch import BatchCollector
from .browse import RemoteCatalogBrowser

__all__ = [
    "RemoteFetchClient",
    "build_api_url",
    "build_query_url",
    "with_page",
    "Episode",
    "PlaySource",
    "parse_play_urls",
    "RemoteCategory",
    "SourceConfig",
    "VodEntry",
    "VodListResponse",
    "parse_entry",
    "parse_list_response",
    "CatalogWriter",
    "MergeResult",
    "VideoMerger",
    "merge_play_sources",
    "strip_play_source",
    "PageCollector",
    "PageResult",
    "BatchCollector",
    "RemoteCatalogBrowser"
]
