"""
Wiring of the collection pipeline shared by the API, the CLI and the scheduler process
"""
import asyncio
from dataclasses import dataclass
from typing import Optional

from .collector import (
    BatchCollector,
    CatalogWriter,
    PageCollector,
    RemoteCatalogBrowser,
    RemoteFetchClient,
    VideoMerger,
)
from .database import Database
from .scheduler import SchedulerService
from .storage.images import ImageLocalizer
from .tasks import BatchDeleteProgress, TaskProgress, TaskRegistry
from .tasks.batch_delete import BatchDeleteService, BatchSourceDeleter
from .tasks.service import CollectionTaskService


@dataclass
class Services:
    database: Database
    client: RemoteFetchClient
    collect_registry: TaskRegistry[TaskProgress]
    delete_registry: TaskRegistry[BatchDeleteProgress]
    collector: BatchCollector
    collect_tasks: CollectionTaskService
    batch_delete: BatchDeleteService
    scheduler: SchedulerService
    browser: RemoteCatalogBrowser

    async def close(self):
        await self.scheduler.shutdown()
        await self.client.close()
        await self.database.dispose()


def build_services(
    database: Optional[Database] = None,
    client=None,
    sleep=asyncio.sleep
) -> Services:
    """Construct every component with explicit dependencies"""
    database = database or Database()
    client = client or RemoteFetchClient()

    collect_registry: TaskRegistry[TaskProgress] = TaskRegistry()
    delete_registry: TaskRegistry[BatchDeleteProgress] = TaskRegistry()

    localizer = ImageLocalizer(client, sleep=sleep)
    writer = CatalogWriter(database, VideoMerger(localizer))
    page_collector = PageCollector(client, writer, collect_registry)
    collector = BatchCollector(client, page_collector, collect_registry, sleep=sleep)

    return Services(
        database=database,
        client=client,
        collect_registry=collect_registry,
        delete_registry=delete_registry,
        collector=collector,
        collect_tasks=CollectionTaskService(database, collect_registry, collector),
        batch_delete=BatchDeleteService(delete_registry, BatchSourceDeleter(database, delete_registry)),
        scheduler=SchedulerService(database, collector, sleep=sleep),
        browser=RemoteCatalogBrowser(client),
    )
