"""
Catalog lookups and keyset scans over videos
"""
from typing import List, Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import Video


class VideosRepository:
    """Repository for catalog video rows"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_match(self, name: str, year: Optional[str] = None) -> Optional[Video]:
        """
        Find the catalog row an incoming entry should merge into

        Matches by name and year when a non-empty year is given, otherwise
        by name alone. The oldest row wins when duplicates exist.
        """
        stmt = select(Video).where(Video.name == name)
        if year:
            stmt = stmt.where(Video.year == year)
        result = await self.session.execute(stmt.order_by(Video.id).limit(1))
        return result.scalar_one_or_none()

    async def scan_after(self, last_id: int, limit: int) -> List[Video]:
        """Keyset page: rows with id > last_id in id order"""
        result = await self.session.execute(
            select(Video).where(Video.id > last_id).order_by(Video.id).limit(limit)
        )
        return list(result.scalars().all())

    async def count(self) -> int:
        result = await self.session.execute(select(func.count()).select_from(Video))
        return result.scalar_one()

    async def get(self, video_id: int) -> Optional[Video]:
        return await self.session.get(Video, video_id)
