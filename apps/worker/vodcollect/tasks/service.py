"""
Starting, polling and stopping batch collection tasks
"""
import asyncio
import uuid
from typing import Any, Dict, List, Optional

from .progress import FAILED, RUNNING, TaskProgress
from .registry import TaskRegistry
from ..collector.batch import BatchCollector
from ..collector.schemas import SourceConfig
from ..database import SourcesRepository
from ..errors import PageCountError, SourceNotFoundError
from ..logging_config import get_logger

logger = get_logger(__name__)


def new_task_id() -> str:
    return uuid.uuid4().hex


class CollectionTaskService:
    """Admin-facing operations over collection tasks"""

    def __init__(self, database, registry: TaskRegistry[TaskProgress], collector: BatchCollector):
        self.database = database
        self.registry = registry
        self.collector = collector

    async def load_source(self, source_id: int) -> SourceConfig:
        async with self.database.session() as session:
            source = await SourcesRepository(session).get(source_id)
            if source is None:
                raise SourceNotFoundError(f"Collection source {source_id} not found")
            return SourceConfig.from_model(source)

    async def start(self, source_id: int, hours: Optional[int] = None) -> str:
        """
        Start a background collection run and return its task id

        Raises:
            SourceNotFoundError: when the source does not exist
        """
        source = await self.load_source(source_id)
        task_id = new_task_id()

        await self.registry.upsert(
            task_id,
            TaskProgress(status=RUNNING, total_pages=1, log="Starting collection task..."),
            source.name,
        )
        handle = asyncio.create_task(self.run_source(source, hours, task_id))
        await self.registry.attach_handle(task_id, handle)

        logger.info(f"Started collection task for {source.name}", extra={"task_id": task_id, "source_name": source.name})
        return task_id

    async def run_source(self, source: SourceConfig, hours: Optional[int], task_id: Optional[str] = None) -> TaskProgress:
        """Run a collection inline; failures end up in the returned progress"""
        task_id = task_id or new_task_id()
        try:
            return await self.collector.run(source, hours, task_id)
        except asyncio.CancelledError:
            logger.info("Collection task cancelled", extra={"task_id": task_id})
            raise
        except PageCountError:
            return await self.registry.get(task_id)
        except Exception as e:
            logger.error(f"Collection task failed: {e}", exc_info=True, extra={"task_id": task_id})
            progress = await self.registry.get(task_id) or TaskProgress()
            progress.status = FAILED
            progress.log = f"Collection failed: {e}"
            await self.registry.upsert(task_id, progress, source.name)
            return await self.registry.get(task_id)

    async def progress(self, task_id: str) -> TaskProgress:
        return await self.registry.get(task_id) or TaskProgress.not_found()

    async def running(self) -> List[Dict[str, Any]]:
        return await self.registry.list_running()

    async def stop(self, task_id: str) -> bool:
        return await self.registry.stop(task_id)
