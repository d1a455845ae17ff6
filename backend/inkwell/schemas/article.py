"""
Inkwell Backend — Article & Moderation Schemas
===============================================

What:  API contract for article listings, article detail and the admin
       moderation endpoints.
"""

import uuid
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class AuthorSummary(BaseModel):
    """Public byline attached to moderation listings."""

    id: uuid.UUID
    username: Optional[str] = None
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None


class ArticleSummary(BaseModel):
    """
    Compact representation for list views. Omits `content` to keep list
    payloads small.
    """

    id: uuid.UUID
    author_id: uuid.UUID
    title: str
    slug: str
    excerpt: Optional[str] = None
    language: str
    category: Optional[str] = None
    featured_image_url: Optional[str] = None
    status: str
    published_at: Optional[datetime] = None
    reading_time_minutes: Optional[int] = None
    view_count: int = 0
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ArticleResponse(ArticleSummary):
    """Full article, including body and SEO fields."""

    content: str
    seo_title: Optional[str] = None
    seo_description: Optional[str] = None
    seo_keywords: Optional[str] = None


class ArticleListResponse(BaseModel):
    articles: List[ArticleSummary]
    total: int = Field(description="Total articles matching the filters")
    limit: int
    offset: int


# ── Moderation ────────────────────────────────────────────────────────────


class ModerationReason(BaseModel):
    """Optional body for reject / unpublish."""

    reason: Optional[str] = Field(default=None, max_length=1000)


class PendingArticle(ArticleResponse):
    author: Optional[AuthorSummary] = None


class PendingArticlesResponse(BaseModel):
    articles: List[PendingArticle]
    count: int


class PublishedArticlesResponse(BaseModel):
    articles: List[PendingArticle]
    total: int
    limit: int
    offset: int


class ModerationResult(BaseModel):
    """Returned by approve / reject / unpublish / submit."""

    article: ArticleResponse
    message: str


# ── Authoring ─────────────────────────────────────────────────────────────


class ArticleDraft(BaseModel):
    """
    Body of POST /api/articles/draft.

    Without `id` a new draft is created; with `id` the caller's existing
    draft is updated. The slug is derived from the title unless given.
    """

    id: Optional[uuid.UUID] = None
    title: str = Field(min_length=1, max_length=255)
    content: str = Field(min_length=1)
    excerpt: Optional[str] = Field(default=None, max_length=1000)
    slug: Optional[str] = Field(default=None, max_length=100)
    language: Optional[Literal["en", "th"]] = None
    category: Optional[str] = Field(default=None, max_length=100)
    featured_image_url: Optional[str] = None
    seo_title: Optional[str] = Field(default=None, max_length=255)
    seo_description: Optional[str] = None
    seo_keywords: Optional[str] = None

    model_config = {"str_strip_whitespace": True}


class AuthorArticleListResponse(BaseModel):
    articles: List[ArticleSummary]
    count: int
