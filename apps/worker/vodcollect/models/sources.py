"""
Collection source model - Aggregator endpoints the worker ingests from
"""
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from .base import Base


class CollectionSource(Base):
    __tablename__ = "collection_sources"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
        doc="Unique identifier for the source"
    )

    # Core source information
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        doc="Source name, also the source_flag used by category bindings"
    )
    api_url: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        doc="Base URL of the provide/vod style API"
    )
    source_type: Mapped[int] = mapped_column(
        Integer,
        default=1,
        nullable=False,
        doc="Source type: 1 = video"
    )

    # Ingestion options
    sync_pictures: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
        doc="Download posters to local storage on insert"
    )
    remove_ads: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    convert_webp: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
        doc="Transcode localized posters to WebP"
    )
    download_retry: Mapped[int] = mapped_column(
        Integer,
        default=3,
        nullable=False,
        doc="Attempts per poster download"
    )
    play_from_filter: Mapped[str] = mapped_column(
        Text,
        default="",
        nullable=False,
        doc="Comma-separated play source names to ingest, empty means all"
    )

    enabled: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
        doc="Whether scheduled cycles include this source"
    )

    # Metadata
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        doc="When this source was created"
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
        doc="When this source was last updated"
    )

    def __repr__(self) -> str:
        return f"<CollectionSource(id={self.id}, name='{self.name}', enabled={self.enabled})>"
