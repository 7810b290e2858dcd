"""
Scheduled collection endpoints
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from .deps import get_scheduler
from ..logging_config import setup_logging
from ..scheduler import SchedulerService

logger = setup_logging(__name__)

router = APIRouter(prefix="/admin/scheduled-task", tags=["scheduler"])


class ScheduleConfigUpdate(BaseModel):
    enabled: bool
    interval_hours: Optional[int] = Field(default=None, ge=1)


@router.get("/status")
async def get_status(scheduler: SchedulerService = Depends(get_scheduler)):
    return {"success": True, "status": await scheduler.status()}


@router.post("/start")
async def start_schedule(scheduler: SchedulerService = Depends(get_scheduler)):
    """Enable the schedule; the first cycle runs in the background"""
    task_id = await scheduler.start_in_background()
    logger.info("Scheduled collection started from the admin API", extra={"task_id": task_id})
    return {"success": True, "task_id": task_id, "message": "Scheduled collection started"}


@router.post("/stop")
async def stop_schedule(scheduler: SchedulerService = Depends(get_scheduler)):
    await scheduler.stop()
    return {"success": True, "message": "Scheduled collection stopped"}


@router.put("/config")
async def update_config(payload: ScheduleConfigUpdate, scheduler: SchedulerService = Depends(get_scheduler)):
    config = await scheduler.update_config(payload.enabled, payload.interval_hours)
    return {"success": True, "config": config}


@router.get("/logs")
async def get_logs(
    limit: int = Query(50, ge=1, le=500),
    scheduler: SchedulerService = Depends(get_scheduler)
):
    return {"success": True, "logs": await scheduler.recent_logs(limit)}
