"""
Inkwell Backend — SEO Routes
=============================

GET /api/articles/{slug}/metadata   head metadata for the article page
GET /sitemap.xml                    published articles + static pages
GET /robots.txt                     crawl rules

The sitemap and robots files sit at the site root (no /api prefix) and are
exempt from rate limiting.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import PlainTextResponse, Response
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.database import get_db_session
from inkwell.schemas.common import ApiResponse, ErrorResponse
from inkwell.schemas.seo import ArticleMetadata
from inkwell.services.seo_service import seo_service

router = APIRouter(tags=["SEO"])

# One hour of shared caching for sitemap.xml and robots.txt
SEO_FILE_CACHE = "public, max-age=3600"


@router.get(
    "/api/articles/{slug}/metadata",
    response_model=ApiResponse[ArticleMetadata],
    responses={404: {"description": "No published article with this slug", "model": ErrorResponse}},
)
async def article_metadata(
    slug: str,
    language: Optional[str] = Query(default=None),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[ArticleMetadata]:
    metadata = await seo_service.build_article_metadata(db, slug, language=language)
    return ApiResponse(data=metadata)


@router.get("/sitemap.xml", response_class=Response, include_in_schema=False)
async def sitemap(db: AsyncSession = Depends(get_db_session)) -> Response:
    entries = await seo_service.sitemap_entries(db)
    return Response(
        content=seo_service.render_sitemap(entries),
        media_type="application/xml",
        headers={"Cache-Control": SEO_FILE_CACHE},
    )


@router.get("/robots.txt", response_class=PlainTextResponse, include_in_schema=False)
async def robots() -> PlainTextResponse:
    return PlainTextResponse(
        seo_service.render_robots(), headers={"Cache-Control": SEO_FILE_CACHE}
    )
