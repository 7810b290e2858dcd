"""
Merging remote video records into the local catalog
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from .playlist import PlaySource, parse_play_urls
from .schemas import SourceConfig, VodEntry
from ..database import BindingsRepository, VideosRepository
from ..errors import DownloadError
from ..logging_config import setup_logging
from ..models import Video
from ..models.base import utcnow

logger = setup_logging(__name__)


@dataclass
class MergeResult:
    video: Video
    created: bool
    changed: bool


def merge_play_sources(
    existing: List[Dict[str, Any]],
    incoming: List[PlaySource]
) -> Tuple[List[Dict[str, Any]], bool]:
    """
    Upsert play sources by source_name

    A same-named entry is replaced in place, a new name is appended, and
    entries for other names are kept untouched. Returns the new list and
    whether anything differs from `existing`.
    """
    merged = [dict(entry) for entry in existing or []]
    changed = False

    for source in incoming:
        payload = source.model_dump()
        position = next(
            (i for i, entry in enumerate(merged) if entry.get("source_name") == source.source_name),
            None,
        )
        if position is None:
            merged.append(payload)
            changed = True
        elif merged[position] != payload:
            merged[position] = payload
            changed = True

    return merged, changed


def strip_play_source(existing: List[Dict[str, Any]], source_name: str) -> Tuple[List[Dict[str, Any]], bool]:
    """Drop every play source named `source_name`"""
    kept = [entry for entry in existing or [] if entry.get("source_name") != source_name]
    return kept, len(kept) != len(existing or [])


class VideoMerger:
    """Builds new catalog rows or folds incoming play sources into existing ones"""

    def __init__(self, localizer=None):
        self.localizer = localizer

    def _play_sources(self, entry: VodEntry, source: SourceConfig) -> List[PlaySource]:
        play_sources = parse_play_urls(entry.vod_play_from, entry.vod_play_url)
        allowed = source.allowed_play_sources()
        if allowed:
            play_sources = [ps for ps in play_sources if ps.source_name in allowed]
        return play_sources

    async def _resolve_pic(self, entry: VodEntry, source: SourceConfig) -> Optional[str]:
        if not (source.sync_pictures and entry.vod_pic and self.localizer):
            return entry.vod_pic
        try:
            return await self.localizer.localize(entry.vod_pic, source.download_retry, source.convert_webp)
        except DownloadError as e:
            logger.warning(
                f"Keeping remote poster for {entry.vod_name}: {e}",
                extra={"video_name": entry.vod_name, "source_name": source.name},
            )
            return entry.vod_pic

    async def merge(
        self,
        existing: Optional[Video],
        incoming: VodEntry,
        local_type_id: int,
        source: SourceConfig
    ) -> MergeResult:
        play_sources = self._play_sources(incoming, source)

        if existing is None:
            video = Video(
                name=incoming.vod_name,
                year=incoming.vod_year,
                type_id=local_type_id,
                status=incoming.vod_status,
                vod_class=incoming.vod_class,
                pic=await self._resolve_pic(incoming, source),
                actor=incoming.vod_actor,
                director=incoming.vod_director,
                remarks=incoming.vod_remarks,
                area=incoming.vod_area,
                lang=incoming.vod_lang,
                content=incoming.vod_content,
                pubdate=utcnow(),
                hits=0,
                hits_day=0,
                hits_week=0,
                hits_month=0,
                score="0.0",
                play_sources=[ps.model_dump() for ps in play_sources],
            )
            return MergeResult(video=video, created=True, changed=True)

        merged, sources_changed = merge_play_sources(existing.play_sources, play_sources)
        remarks_changed = existing.remarks != incoming.vod_remarks
        if not (sources_changed or remarks_changed):
            return MergeResult(video=existing, created=False, changed=False)

        # New list object so the JSON column is flagged dirty
        existing.play_sources = merged
        existing.remarks = incoming.vod_remarks
        existing.pubdate = utcnow()
        return MergeResult(video=existing, created=False, changed=True)


class CatalogWriter:
    """Resolves, merges and persists a single remote entry"""

    def __init__(self, database, merger: VideoMerger):
        self.database = database
        self.merger = merger

    async def write(self, source: SourceConfig, entry: VodEntry) -> MergeResult:
        """
        Raises:
            BindingNotFoundError: when the entry's category is not bound
        """
        async with self.database.session() as session:
            binding = await BindingsRepository(session).resolve(source.name, entry.type_id)
            existing = await VideosRepository(session).find_match(entry.vod_name, entry.vod_year)

            result = await self.merger.merge(existing, entry, binding.local_type_id, source)
            if result.created:
                session.add(result.video)
            if result.changed:
                await session.commit()
            return result
