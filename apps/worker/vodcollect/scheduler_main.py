"""
Main entry point for the standalone collection scheduler
Runs the scheduler loop outside the API process
"""
import asyncio
import signal
import sys
from typing import Optional

from .logging_config import get_logger
from .services import Services, build_services

logger = get_logger(__name__)


class SchedulerMain:
    """Main scheduler application"""

    def __init__(self):
        self.services: Optional[Services] = None
        self.shutdown_event = asyncio.Event()

    async def startup(self):
        """Initialize the scheduler application"""
        logger.info("Starting VOD collection scheduler")

        self.services = build_services()
        config = await self.services.scheduler.initialize()
        if config.enabled:
            logger.info(f"Scheduler resumed, next run at {config.next_run}")
        else:
            logger.info("Scheduler is disabled; enable it from the admin API")

    async def shutdown(self):
        """Shutdown the scheduler application"""
        logger.info("Shutting down VOD collection scheduler")

        if self.services:
            await self.services.close()

        logger.info("Scheduler shutdown complete")

    def setup_signal_handlers(self):
        """Setup signal handlers for graceful shutdown"""
        loop = asyncio.get_running_loop()

        def signal_handler(sig):
            logger.info(f"Received signal {sig.name}, initiating shutdown...")
            self.shutdown_event.set()

        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, signal_handler, sig)

    async def run(self):
        """Run the scheduler application"""
        try:
            await self.startup()

            # Wait for shutdown signal
            await self.shutdown_event.wait()

        except Exception as e:
            logger.error(f"Scheduler application error: {e}", exc_info=True)
            sys.exit(1)
        finally:
            await self.shutdown()


async def main():
    """Main entry point"""
    scheduler = SchedulerMain()
    scheduler.setup_signal_handlers()
    await scheduler.run()


def run():
    asyncio.run(main())


if __name__ == "__main__":
    run()
