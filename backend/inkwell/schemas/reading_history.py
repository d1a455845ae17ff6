"""
Inkwell Backend — Reading History Schemas
==========================================
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

MAX_BEACON_SECONDS = 86400


class ReadingProgress(BaseModel):
    """Body of POST /api/articles/{id}/reading-history."""

    scroll_percentage: int = Field(default=0, ge=0, le=100)
    # One beacon covers at most a day of reading
    time_spent_seconds: int = Field(default=0, ge=0, le=MAX_BEACON_SECONDS)
    completed: bool = False
    completion_percentage: int = Field(default=0, ge=0, le=100)


class ReadingHistoryResponse(BaseModel):
    id: uuid.UUID
    article_id: uuid.UUID
    user_id: uuid.UUID
    scroll_percentage: int
    time_spent_seconds: int
    completed: bool
    completion_percentage: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class HistoryArticle(BaseModel):
    id: uuid.UUID
    title: str
    slug: str
    excerpt: Optional[str] = None
    featured_image_url: Optional[str] = None
    published_at: Optional[datetime] = None
    reading_time_minutes: Optional[int] = None

    model_config = {"from_attributes": True}


class ReadingHistoryItem(ReadingHistoryResponse):
    article: Optional[HistoryArticle] = None


class ReadingHistoryPage(BaseModel):
    history: List[ReadingHistoryItem]
    total: int
    page: int
    limit: int


class ReadingHistoryDelete(BaseModel):
    """Body of DELETE /api/reading-history."""

    article_id: uuid.UUID
