"""
Collection task and remote browsing endpoints
"""
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from .deps import get_collect_tasks, get_services
from ..errors import CollectError, SourceNotFoundError
from ..logging_config import setup_logging
from ..services import Services
from ..tasks.progress import TaskProgress
from ..tasks.service import CollectionTaskService

logger = setup_logging(__name__)

router = APIRouter(prefix="/admin", tags=["collect"])


class CollectStartRequest(BaseModel):
    hours: Optional[int] = None


class CollectStartResponse(BaseModel):
    success: bool
    task_id: str
    message: str


class ProgressResponse(BaseModel):
    success: bool
    progress: TaskProgress


class RunningTasksResponse(BaseModel):
    success: bool
    tasks: List[Dict[str, Any]]


class MessageResponse(BaseModel):
    success: bool
    message: str


@router.post("/collections/{source_id}/collect", response_model=CollectStartResponse)
async def start_collect(
    source_id: int,
    payload: Optional[CollectStartRequest] = None,
    tasks: CollectionTaskService = Depends(get_collect_tasks)
):
    """Start a background collection run for one source"""
    hours = payload.hours if payload else None
    try:
        task_id = await tasks.start(source_id, hours)
    except SourceNotFoundError as e:
        return JSONResponse(status_code=404, content={"success": False, "message": str(e)})
    return CollectStartResponse(success=True, task_id=task_id, message="Collection task started")


@router.get("/collect/progress/{task_id}", response_model=ProgressResponse)
async def get_progress(task_id: str, tasks: CollectionTaskService = Depends(get_collect_tasks)):
    return ProgressResponse(success=True, progress=await tasks.progress(task_id))


@router.get("/collect/running-tasks", response_model=RunningTasksResponse)
async def get_running_tasks(tasks: CollectionTaskService = Depends(get_collect_tasks)):
    return RunningTasksResponse(success=True, tasks=await tasks.running())


@router.post("/collect/stop/{task_id}", response_model=MessageResponse)
async def stop_task(task_id: str, tasks: CollectionTaskService = Depends(get_collect_tasks)):
    if not await tasks.stop(task_id):
        return JSONResponse(
            status_code=404,
            content={"success": False, "message": "Task not found or already stopped"},
        )
    return MessageResponse(success=True, message="Task stopped")


@router.get("/collect/categories")
async def get_remote_categories(url: str = Query(...), services: Services = Depends(get_services)):
    """Categories advertised by a remote aggregator"""
    try:
        result = await services.browser.categories(url)
    except CollectError as e:
        logger.error(f"Failed to fetch categories from {url}: {e}")
        return {"success": False, "message": f"Failed to fetch categories: {e}"}
    return {"success": True, **result}


@router.get("/collect/videos")
async def get_remote_videos(
    url: str = Query(...),
    page: Optional[int] = Query(None, ge=1),
    type: Optional[str] = Query(None),
    wd: Optional[str] = Query(None),
    limit: int = Query(20, ge=1),
    services: Services = Depends(get_services)
):
    """One page of a remote aggregator's video list"""
    try:
        result = await services.browser.videos(url, page=page, type_id=type, wd=wd, limit=limit)
    except CollectError as e:
        logger.error(f"Failed to fetch videos from {url}: {e}")
        return {"success": False, "message": f"Failed to fetch videos: {e}"}
    return {"success": True, **result}
