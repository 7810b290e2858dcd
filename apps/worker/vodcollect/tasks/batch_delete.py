"""
Batch removal of one upstream source's play lists from the whole catalog
"""
import asyncio
from typing import Any, Dict, List, Optional

from .progress import COMPLETED, FAILED, RUNNING, BatchDeleteProgress
from .registry import TaskRegistry
from .service import new_task_id
from ..collector.merger import strip_play_source
from ..config import settings
from ..database import VideosRepository
from ..errors import StorageError
from ..logging_config import get_logger, PerformanceLogger

logger = get_logger(__name__)


class BatchSourceDeleter:
    """Keyset scan over videos stripping play sources of one name"""

    def __init__(
        self,
        database,
        registry: TaskRegistry[BatchDeleteProgress],
        batch_size: Optional[int] = None,
        progress_every: Optional[int] = None
    ):
        self.database = database
        self.registry = registry
        self.batch_size = batch_size or settings.BATCH_DELETE_BATCH_SIZE
        self.progress_every = progress_every or settings.BATCH_DELETE_PROGRESS_EVERY

    async def run(self, source_name: str, task_id: str) -> BatchDeleteProgress:
        """
        Visit every video exactly once in id order

        Rows are persisted only when a play source was removed, with one
        commit per batch. A stop request is honoured at progress checkpoints.

        Raises:
            StorageError: when reading or writing the catalog fails
        """
        progress = BatchDeleteProgress(status=RUNNING, source_name=source_name, log="Counting videos...")
        await self.registry.upsert(task_id, progress, source_name)

        try:
            with PerformanceLogger(logger, "batch_delete_source", task_id=task_id, source_name=source_name):
                async with self.database.session() as session:
                    progress.total = await VideosRepository(session).count()

                last_id = 0
                while True:
                    if await self.registry.is_stopped(task_id):
                        return await self.registry.get(task_id)

                    async with self.database.session() as session:
                        rows = await VideosRepository(session).scan_after(last_id, self.batch_size)
                        for video in rows:
                            play_sources, changed = strip_play_source(video.play_sources, source_name)
                            if changed:
                                video.play_sources = play_sources
                                progress.modified += 1
                            progress.processed += 1

                            if progress.processed % self.progress_every == 0:
                                progress.log = f"Processed {progress.processed}/{progress.total}, modified {progress.modified}"
                                await self.registry.upsert(task_id, progress, source_name)
                                if await self.registry.is_stopped(task_id):
                                    await session.commit()
                                    logger.info("Batch delete stopped", extra={"task_id": task_id})
                                    return await self.registry.get(task_id)

                        await session.commit()

                    if rows:
                        last_id = rows[-1].id
                    if len(rows) < self.batch_size:
                        break
        except asyncio.CancelledError:
            raise
        except Exception as e:
            progress.status = FAILED
            progress.log = f"Batch delete failed: {e}"
            await self.registry.upsert(task_id, progress, source_name)
            raise StorageError(f"Batch delete of {source_name} failed: {e}") from e

        progress.status = COMPLETED
        progress.log = f"Done, processed {progress.processed}, modified {progress.modified}"
        await self.registry.upsert(task_id, progress, source_name)
        logger.info(progress.log, extra={"task_id": task_id, "source_name": source_name})
        return await self.registry.get(task_id)


class BatchDeleteService:
    """Admin-facing operations over batch delete tasks"""

    def __init__(self, registry: TaskRegistry[BatchDeleteProgress], deleter: BatchSourceDeleter):
        self.registry = registry
        self.deleter = deleter

    async def start(self, source_name: str) -> str:
        task_id = new_task_id()
        await self.registry.upsert(
            task_id,
            BatchDeleteProgress(status=RUNNING, source_name=source_name, log="Starting batch delete..."),
            source_name,
        )
        handle = asyncio.create_task(self._run(source_name, task_id))
        await self.registry.attach_handle(task_id, handle)
        logger.info(f"Started batch delete of {source_name}", extra={"task_id": task_id, "source_name": source_name})
        return task_id

    async def _run(self, source_name: str, task_id: str):
        try:
            await self.deleter.run(source_name, task_id)
        except StorageError as e:
            logger.error(str(e), extra={"task_id": task_id})

    async def progress(self, task_id: str) -> BatchDeleteProgress:
        return await self.registry.get(task_id) or BatchDeleteProgress.not_found()

    async def running(self) -> List[Dict[str, Any]]:
        return await self.registry.list_running()

    async def stop(self, task_id: str) -> bool:
        return await self.registry.stop(task_id)
