"""
Read access to collection sources
"""
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import CollectionSource


class SourcesRepository:
    """Repository for collection source lookups"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, source_id: int) -> Optional[CollectionSource]:
        return await self.session.get(CollectionSource, source_id)

    async def get_by_name(self, name: str) -> Optional[CollectionSource]:
        result = await self.session.execute(
            select(CollectionSource).where(CollectionSource.name == name)
        )
        return result.scalar_one_or_none()

    async def list_enabled(self) -> List[CollectionSource]:
        """Enabled sources in a stable order"""
        result = await self.session.execute(
            select(CollectionSource)
            .where(CollectionSource.enabled.is_(True))
            .order_by(CollectionSource.id)
        )
        return list(result.scalars().all())

    async def add(self, source: CollectionSource) -> CollectionSource:
        self.session.add(source)
        await self.session.commit()
        return source
