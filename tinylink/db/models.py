"""
Database Models for the Link Service

This module defines the SQLModel schema for:
- Link: Maps a short code to its target URL and carries visit statistics

Design Decisions:
- Unique index on code: the authoritative uniqueness guard for allocation
- Index on created_at for the newest-first listing
- total_clicks / last_clicked_at live on the row so a visit is one UPDATE
"""

from datetime import datetime, timezone
from typing import Optional

from sqlmodel import SQLModel, Field, Column
from sqlalchemy import String, DateTime, Integer, Text


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive timestamps (SQLite drops tzinfo on the way back)."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class Link(SQLModel, table=True):
    """
    Table storing short code mappings.

    Fields:
    - id: Auto-incrementing surrogate key (also orders rows created in the same instant)
    - code: Unique short code (6-8 characters, [A-Za-z0-9], case-sensitive)
    - target_url: The long URL visitors are redirected to
    - created_at: Timestamp when the link was created
    - total_clicks: Number of resolved visits
    - last_clicked_at: Time of the most recent resolved visit, NULL until the first one
    """
    __tablename__ = "links"

    id: Optional[int] = Field(default=None, primary_key=True)
    code: str = Field(
        sa_column=Column(String(8), nullable=False, unique=True, index=True),
        max_length=8
    )
    target_url: str = Field(sa_column=Column(Text, nullable=False))
    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False, index=True)
    )
    total_clicks: int = Field(default=0, sa_column=Column(Integer, nullable=False, default=0))
    last_clicked_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True), nullable=True)
    )
