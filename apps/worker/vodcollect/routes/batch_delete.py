"""
Batch source deletion endpoints
"""
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, field_validator

from .deps import get_batch_delete
from ..tasks.batch_delete import BatchDeleteService

router = APIRouter(prefix="/admin/vods", tags=["batch-delete"])


class BatchDeleteRequest(BaseModel):
    source_name: str

    @field_validator("source_name")
    @classmethod
    def not_blank(cls, v):
        if not v.strip():
            raise ValueError("source_name must not be empty")
        return v.strip()


@router.post("/batch-delete-source")
async def start_batch_delete(payload: BatchDeleteRequest, service: BatchDeleteService = Depends(get_batch_delete)):
    task_id = await service.start(payload.source_name)
    return {"success": True, "task_id": task_id, "message": "Batch delete started"}


@router.get("/batch-delete-progress/{task_id}")
async def get_batch_delete_progress(task_id: str, service: BatchDeleteService = Depends(get_batch_delete)):
    return {"success": True, "progress": (await service.progress(task_id)).model_dump()}


@router.get("/batch-delete-running")
async def get_batch_delete_running(service: BatchDeleteService = Depends(get_batch_delete)):
    return {"success": True, "tasks": await service.running()}


@router.post("/batch-delete-stop/{task_id}")
async def stop_batch_delete(task_id: str, service: BatchDeleteService = Depends(get_batch_delete)):
    if not await service.stop(task_id):
        return JSONResponse(
            status_code=404,
            content={"success": False, "message": "Task not found or already stopped"},
        )
    return {"success": True, "message": "Batch delete stopped"}
