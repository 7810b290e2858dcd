"""
Video model - One catalog entry with its per-source play lists
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class Video(Base):
    __tablename__ = "videos"

    # Integer key doubles as the keyset for batch scans
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
        doc="Display title, the primary dedup key"
    )
    year: Mapped[Optional[str]] = mapped_column(String(16), nullable=True)
    type_id: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        doc="Local category id resolved through a binding"
    )
    status: Mapped[int] = mapped_column(Integer, default=1, nullable=False)

    # Descriptive metadata
    vod_class: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    pic: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    actor: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    director: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    remarks: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    area: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    lang: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    content: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    pubdate: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        doc="Last time the playable content changed"
    )

    # Counters
    hits: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    hits_day: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    hits_week: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    hits_month: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    score: Mapped[str] = mapped_column(String(16), default="0.0", nullable=False)

    play_sources: Mapped[List[Dict[str, Any]]] = mapped_column(
        JSON,
        default=list,
        nullable=False,
        doc="List of {source_name, urls: [{name, url}]}, one per source_name"
    )

    def __repr__(self) -> str:
        return f"<Video(id={self.id}, name='{self.name}', year={self.year}, sources={len(self.play_sources or [])})>"
