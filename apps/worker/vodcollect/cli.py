"""
CLI entrypoint to run collections and maintenance without the API service.

Use cases:
- Manual run for one source: vodcollect collect --source example --hours 24
- Cron-style full refresh: vodcollect collect --all
- Remove an upstream source from every video: vodcollect delete-source example

Behavior:
- Reads sources from the database
- Runs the same batch collector the API and scheduler use, inline
- Logs per-source counters and exits non-zero when a run failed
"""
import argparse
import asyncio
import sys
from typing import Dict, List, Optional

from .collector.schemas import SourceConfig
from .errors import StorageError
from .database import SourcesRepository
from .logging_config import setup_logging
from .services import Services, build_services
from .tasks.progress import COMPLETED, TaskProgress
from .tasks.service import new_task_id


logger = setup_logging(__name__)


async def _load_sources(services: Services, name: Optional[str]) -> List[SourceConfig]:
    async with services.database.session() as session:
        repo = SourcesRepository(session)
        if name is None:
            return [SourceConfig.from_model(s) for s in await repo.list_enabled()]
        source = await repo.get_by_name(name)
        return [SourceConfig.from_model(source)] if source else []


async def run_collect(source_name: Optional[str] = None, hours: Optional[int] = None) -> Dict[str, TaskProgress]:
    """Collect one named source, or every enabled source when no name is given"""
    services = build_services()
    out: Dict[str, TaskProgress] = {}
    try:
        sources = await _load_sources(services, source_name)
        if not sources:
            logger.info("No matching sources found. Nothing to do.")
            return out

        for source in sources:
            logger.info(f"Collecting source {source.id} - {source.name} {source.api_url}")
            out[source.name] = await services.collect_tasks.run_source(source, hours, new_task_id())
    finally:
        await services.close()
    return out


async def run_delete_source(source_name: str):
    services = build_services()
    try:
        return await services.batch_delete.deleter.run(source_name, new_task_id())
    finally:
        await services.close()


def _parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="vodcollect", description="VOD catalog collection tools")
    sub = parser.add_subparsers(dest="command", required=True)

    collect = sub.add_parser("collect", help="Run a batch collection inline")
    target = collect.add_mutually_exclusive_group(required=True)
    target.add_argument("--source", help="Collection source name")
    target.add_argument("--all", action="store_true", help="Every enabled source")
    collect.add_argument("--hours", type=int, default=None, help="Only entries changed within N hours")

    delete = sub.add_parser("delete-source", help="Strip one play source from every video")
    delete.add_argument("source_name", help="Play source name to remove")

    return parser.parse_args(argv)


def main(argv=None):
    args = _parse_args(argv)

    if args.command == "collect":
        out = asyncio.run(run_collect(None if args.all else args.source, args.hours))
        for name, progress in out.items():
            logger.info(f"Source {name} -> {progress.status}, success={progress.success}, failed={progress.failed}")
        if not out or any(p.status != COMPLETED for p in out.values()):
            sys.exit(1)
    elif args.command == "delete-source":
        try:
            progress = asyncio.run(run_delete_source(args.source_name))
        except StorageError as e:
            logger.error(f"Removing {args.source_name} failed: {e}")
            sys.exit(1)
        logger.info(f"Removed {args.source_name} from {progress.modified} of {progress.processed} videos")


if __name__ == "__main__":
    main()
