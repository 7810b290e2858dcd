"""
Batch collection of every page a source reports
"""
import asyncio
from typing import Awaitable, Callable, Optional

from .client import build_api_url, with_page
from .page import PageCollector
from .schemas import SourceConfig, parse_list_response
from ..config import settings
from ..errors import CollectError, PageCountError
from ..logging_config import setup_logging, PerformanceLogger
from ..tasks.progress import COMPLETED, FAILED, RUNNING, TaskProgress
from ..tasks.registry import TaskRegistry

logger = setup_logging(__name__)

Sleep = Callable[[float], Awaitable[None]]


class BatchCollector:
    """Drives one collection run: page-count check, then pages in order"""

    def __init__(
        self,
        client,
        page_collector: PageCollector,
        registry: TaskRegistry[TaskProgress],
        max_attempts: Optional[int] = None,
        page_delay: Optional[float] = None,
        sleep: Sleep = asyncio.sleep
    ):
        config = settings.get_collector_config()
        self.client = client
        self.page_collector = page_collector
        self.registry = registry
        self.max_attempts = max_attempts or config["max_attempts"]
        self.page_delay = config["page_delay"] if page_delay is None else page_delay
        self.sleep = sleep

    async def get_total_pages(self, api_url: str, task_id: str) -> int:
        """
        Probe page 1 for the page count, backing off 1s, 2s, ... between attempts

        Raises:
            PageCountError: when every attempt failed
        """
        last_error: Optional[CollectError] = None
        for attempt in range(1, self.max_attempts + 1):
            try:
                body = await self.client.fetch_text(with_page(api_url, 1))
                total_pages = parse_list_response(body).total_pages()
                logger.info(f"Source reports {total_pages} pages", extra={"task_id": task_id})
                return total_pages
            except CollectError as e:
                last_error = e
                logger.warning(
                    f"Page count check failed ({attempt}/{self.max_attempts}): {e}",
                    extra={"task_id": task_id},
                )
                if attempt < self.max_attempts:
                    await self.sleep(2 ** (attempt - 1))

        raise PageCountError(f"Failed to get page count after {self.max_attempts} attempts: {last_error}") from last_error

    async def run(self, source: SourceConfig, hours: Optional[int], task_id: str) -> TaskProgress:
        """
        Collect all pages of a source

        Returns the final progress. A stopped task returns early without
        error. Raises PageCountError after marking the task failed.
        """
        progress = TaskProgress(status=RUNNING, total_pages=1, log="Fetching page count...")
        await self.registry.upsert(task_id, progress, source.name)

        api_url = build_api_url(source.api_url, "detail", hours)

        try:
            total_pages = await self.get_total_pages(api_url, task_id)
        except PageCountError as e:
            progress.status = FAILED
            progress.log = str(e)
            await self.registry.upsert(task_id, progress, source.name)
            raise

        progress.total_pages = total_pages
        progress.log = f"Starting collection, total pages: {total_pages}"
        await self.registry.upsert(task_id, progress, source.name)

        with PerformanceLogger(logger, "batch_collect", task_id=task_id, source_name=source.name):
            for page in range(1, total_pages + 1):
                if await self.registry.is_stopped(task_id):
                    logger.info(f"Task stopped before page {page}", extra={"task_id": task_id, "page": page})
                    return await self.registry.get(task_id)

                progress.current_page = page
                progress.log = f"Collecting page {page}/{total_pages}"
                await self.registry.upsert(task_id, progress, source.name)

                try:
                    result = await self.page_collector.collect_page(
                        source, with_page(api_url, page), progress, task_id
                    )
                except CollectError as e:
                    progress.failed += 1
                    progress.log = f"Page {page} failed: {e}"
                    logger.error(progress.log, extra={"task_id": task_id, "page": page})
                    await self.registry.upsert(task_id, progress, source.name)
                    continue

                if result.stopped:
                    return await self.registry.get(task_id)

                await self.sleep(self.page_delay)

        progress.status = COMPLETED
        progress.log = f"Collection finished, success: {progress.success}, failed: {progress.failed}"
        await self.registry.upsert(task_id, progress, source.name)
        logger.info(progress.log, extra={"task_id": task_id, "source_name": source.name})
        return await self.registry.get(task_id)
