"""
Category binding resolution
"""
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from ..errors import BindingNotFoundError
from ..models import Binding


class BindingsRepository:
    """Repository for (source_flag, external_id) -> local category bindings"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find(self, source_flag: str, external_id: str):
        result = await self.session.execute(
            select(Binding).where(
                Binding.source_flag == source_flag,
                Binding.external_id == str(external_id),
            )
        )
        return result.scalar_one_or_none()

    async def resolve(self, source_flag: str, external_id: str) -> Binding:
        """
        Resolve the local category for an upstream category

        Raises:
            BindingNotFoundError: when no binding exists
        """
        binding = await self.find(source_flag, external_id)
        if binding is None:
            raise BindingNotFoundError(source_flag, str(external_id))
        return binding

    async def upsert(
        self,
        source_flag: str,
        external_id: str,
        local_type_id: int,
        local_type_name: str = ""
    ) -> Binding:
        """Create or repoint a binding"""
        binding = await self.find(source_flag, external_id)
        if binding is None:
            binding = Binding(
                source_flag=source_flag,
                external_id=str(external_id),
                local_type_id=local_type_id,
                local_type_name=local_type_name,
            )
            self.session.add(binding)
        else:
            binding.local_type_id = local_type_id
            binding.local_type_name = local_type_name
        await self.session.commit()
        return binding

    async def count_for_source(self, source_flag: str) -> int:
        result = await self.session.execute(
            select(func.count()).select_from(Binding).where(Binding.source_flag == source_flag)
        )
        return result.scalar_one()
