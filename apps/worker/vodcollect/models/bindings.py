"""
Category binding model - Maps an upstream category of a source to a local category
"""
from datetime import datetime

from sqlalchemy import DateTime, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from .base import Base


class Binding(Base):
    __tablename__ = "bindings"
    __table_args__ = (
        UniqueConstraint("source_flag", "external_id", name="uq_bindings_source_flag_external_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    source_flag: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        doc="Name of the collection source"
    )
    external_id: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        doc="Upstream category id, as a string"
    )
    local_type_id: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        doc="Local catalog category id"
    )
    local_type_name: Mapped[str] = mapped_column(String(255), default="", nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now()
    )

    def __repr__(self) -> str:
        return (
            f"<Binding(source_flag='{self.source_flag}', external_id='{self.external_id}', "
            f"local_type_id={self.local_type_id})>"
        )
