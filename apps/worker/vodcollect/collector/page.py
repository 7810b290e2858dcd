"""
Collection of a single listing page
"""
from dataclasses import dataclass

from .merger import CatalogWriter
from .schemas import SourceConfig, parse_entry, parse_list_response
from ..logging_config import setup_logging, PerformanceLogger
from ..tasks.progress import TaskProgress
from ..tasks.registry import TaskRegistry

logger = setup_logging(__name__)


@dataclass
class PageResult:
    success: int = 0
    failed: int = 0
    stopped: bool = False


class PageCollector:
    """Fetches one page and writes its entries into the catalog"""

    def __init__(self, client, writer: CatalogWriter, registry: TaskRegistry[TaskProgress]):
        self.client = client
        self.writer = writer
        self.registry = registry

    async def collect_page(
        self,
        source: SourceConfig,
        page_url: str,
        progress: TaskProgress,
        task_id: str
    ) -> PageResult:
        """
        Collect every entry of one page

        Fetch, decode and envelope errors are raised to the caller. Item
        errors, malformed entries included, are logged and counted.
        `progress` is updated in place and pushed to the registry once the
        page is done.
        """
        with PerformanceLogger(logger, "collect_page", task_id=task_id, source_name=source.name):
            body = await self.client.fetch_text(page_url)
            response = parse_list_response(body)

            result = PageResult()
            for raw in response.items:
                if await self.registry.is_stopped(task_id):
                    result.stopped = True
                    break

                name = raw.get("vod_name") if isinstance(raw, dict) else None
                try:
                    await self.writer.write(source, parse_entry(raw))
                    result.success += 1
                except Exception as e:
                    logger.error(
                        f"Failed to collect {name}: {e}",
                        extra={"task_id": task_id, "source_name": source.name, "video_name": name},
                    )
                    result.failed += 1

            progress.success += result.success
            progress.failed += result.failed
            progress.log = f"Page done, success: {result.success}, failed: {result.failed}"
            await self.registry.upsert(task_id, progress, source.name)

            return result
