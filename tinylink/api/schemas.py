"""
API Request and Response Schemas

This module defines all Pydantic models for API requests and responses.
Separated from endpoints to keep concerns separated and enable reuse.

URL and code validation is left to the allocator so the API and any other
caller get identical error semantics; the request model only checks types.
Both snake_case and the dashboard's camelCase field names are accepted.
"""

from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, Field

from tinylink.db.models import Link, as_utc


class CreateLinkRequest(BaseModel):
    """Request model for link creation."""
    # Optional so a missing URL reaches the allocator and fails as InvalidTargetError
    original_url: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("original_url", "originalUrl", "url"),
        description="The long URL to shorten"
    )
    custom_code: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("custom_code", "customCode"),
        description="Optional short code (6-8 letters or digits)"
    )


class LinkResponse(BaseModel):
    """Response model for a single Link."""
    code: str = Field(..., description="The short code")
    short_url: str = Field(..., description="The complete short URL")
    target_url: str = Field(..., description="The original long URL")
    created_at: datetime
    total_clicks: int
    last_clicked_at: Optional[datetime] = None

    @classmethod
    def from_link(cls, link: Link, base_url: str) -> "LinkResponse":
        return cls(
            code=link.code,
            short_url=f"{base_url.rstrip('/')}/{link.code}",
            target_url=link.target_url,
            created_at=as_utc(link.created_at),
            total_clicks=link.total_clicks,
            last_clicked_at=as_utc(link.last_clicked_at),
        )


class DeleteResponse(BaseModel):
    """Response model for link deletion."""
    ok: bool = True
