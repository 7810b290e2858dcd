"""
Health endpoint
"""
import time

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from .deps import get_services
from ..services import Services

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    status: str
    database: str
    message: str
    response_time_ms: float


@router.get("/health", response_model=HealthResponse)
async def health_check(services: Services = Depends(get_services)):
    """Simple health check"""
    start_time = time.time()

    try:
        async with services.database.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

        return HealthResponse(
            status="healthy",
            database="connected",
            message="All systems operational",
            response_time_ms=round((time.time() - start_time) * 1000, 2)
        )
    except SQLAlchemyError as e:
        return HealthResponse(
            status="unhealthy",
            database="disconnected",
            message=f"Database error: {str(e)}",
            response_time_ms=round((time.time() - start_time) * 1000, 2)
        )
