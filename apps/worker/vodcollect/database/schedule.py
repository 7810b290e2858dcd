"""
Persistence for the scheduler config singleton and execution logs
"""
from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import ScheduledTaskConfig, TaskExecutionLog
from ..models.base import utcnow


class ScheduleRepository:
    """Repository for scheduler state"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_config(self) -> Optional[ScheduledTaskConfig]:
        result = await self.session.execute(
            select(ScheduledTaskConfig).order_by(ScheduledTaskConfig.id).limit(1)
        )
        return result.scalar_one_or_none()

    async def ensure_config(self, default_interval_hours: int, now: Optional[datetime] = None) -> ScheduledTaskConfig:
        """Return the singleton config, creating a disabled default if missing"""
        config = await self.get_config()
        if config is None:
            config = ScheduledTaskConfig(
                enabled=False,
                interval_hours=default_interval_hours,
                next_run=(now or utcnow()) + timedelta(hours=default_interval_hours),
            )
            self.session.add(config)
            await self.session.commit()
        return config

    async def save_config(
        self,
        enabled: bool,
        interval_hours: int,
        next_run: Optional[datetime],
        last_run: Optional[datetime] = None
    ) -> ScheduledTaskConfig:
        """Write the singleton; last_run is only touched when given"""
        config = await self.ensure_config(interval_hours)
        config.enabled = enabled
        config.interval_hours = interval_hours
        config.next_run = next_run
        if last_run is not None:
            config.last_run = last_run
        config.updated_at = utcnow()
        await self.session.commit()
        return config

    async def add_log(self, log: TaskExecutionLog) -> TaskExecutionLog:
        self.session.add(log)
        await self.session.commit()
        return log

    async def finish_log(
        self,
        log_id: int,
        status: str,
        message: str,
        videos_collected: int = 0,
        errors: Optional[str] = None
    ) -> Optional[TaskExecutionLog]:
        log = await self.session.get(TaskExecutionLog, log_id)
        if log is None:
            return None
        log.status = status
        log.message = message
        log.videos_collected = videos_collected
        log.errors = errors
        log.completed_at = utcnow()
        await self.session.commit()
        return log

    async def recent_logs(self, limit: int = 50) -> List[TaskExecutionLog]:
        result = await self.session.execute(
            select(TaskExecutionLog)
            .order_by(TaskExecutionLog.started_at.desc(), TaskExecutionLog.id.desc())
            .limit(limit)
        )
        return list(result.scalars().all())
