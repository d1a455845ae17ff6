"""
Inkwell Backend — SEO Service
==============================

What:  Builds search-engine facing output:
       - per-article metadata (canonical URL, OpenGraph, Twitter card,
         hreflang alternates, schema.org Article JSON-LD)
       - /sitemap.xml (lxml)
       - /robots.txt
Who:   Called by routes/seo.py.

URL scheme:
    The default-locale version of an article lives at /articles/{slug};
    other language versions add ?lang={code}. Every version lists all
    versions (itself included) as hreflang alternates.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List, Optional

from lxml import etree
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.config import settings
from inkwell.exceptions import DatabaseError
from inkwell.models.article import Article, ArticleStatus
from inkwell.models.user_profile import UserProfile
from inkwell.schemas.seo import (
    ArticleMetadata,
    OpenGraph,
    OpenGraphImage,
    TwitterCard,
)
from inkwell.services.article_service import article_service
from inkwell.services.i18n import OG_LOCALES

logger = logging.getLogger(__name__)

MAX_DESCRIPTION_LENGTH = 160
DEFAULT_IMAGE_PATH = "/images/og-default.jpg"
LOGO_PATH = "/images/logo.png"
OG_IMAGE_WIDTH = 1200
OG_IMAGE_HEIGHT = 630

SITEMAP_NS = "http://www.sitemaps.org/schemas/sitemap/0.9"
ROBOTS_DISALLOW = ["/api/", "/admin/", "/cms/", "/unauthorized"]


@dataclass
class SitemapEntry:
    loc: str
    lastmod: datetime
    changefreq: str
    priority: float


# ── Helpers ───────────────────────────────────────────────────────────────


def truncate_description(text: Optional[str], max_length: int = MAX_DESCRIPTION_LENGTH) -> str:
    """
    Collapse whitespace and cut to `max_length` on a word boundary,
    appending "..." when anything was removed.
    """
    text = " ".join((text or "").split())
    if len(text) <= max_length:
        return text
    cut = text[: max_length - 3]
    space = cut.rfind(" ")
    if space > 0:
        cut = cut[:space]
    return cut.rstrip(" ,.;:") + "..."


def absolute_url(path_or_url: str) -> str:
    if path_or_url.startswith(("http://", "https://")):
        return path_or_url
    return f"{settings.site_url}/{path_or_url.lstrip('/')}"


def article_url(slug: str, language: str) -> str:
    url = f"{settings.site_url}/articles/{slug}"
    if language != settings.default_locale:
        url += f"?lang={language}"
    return url


def _iso(value: Optional[datetime]) -> Optional[str]:
    """ISO 8601 in UTC; SQLite hands back naive datetimes, which are UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


def _keywords(article: Article) -> List[str]:
    if article.seo_keywords:
        return [k.strip() for k in article.seo_keywords.split(",") if k.strip()]
    return [article.category] if article.category else []


# ── Metadata ──────────────────────────────────────────────────────────────


class SEOService:
    async def build_article_metadata(
        self,
        db: AsyncSession,
        slug: str,
        language: Optional[str] = None,
    ) -> ArticleMetadata:
        """Metadata for a published article; 404 when there is none."""
        article = await article_service.get_published_by_slug(
            db, slug, language=language, count_view=False
        )
        try:
            author = await db.get(UserProfile, article.author_id)
            versions = (
                await db.execute(
                    select(Article.language).where(
                        Article.slug == article.slug,
                        Article.status == ArticleStatus.PUBLISHED.value,
                        Article.deleted_at.is_(None),
                    )
                )
            ).scalars().all()
        except SQLAlchemyError as e:
            logger.error("Database error building metadata for %s: %s", slug, e, exc_info=True)
            raise DatabaseError(message="Could not build article metadata. Please try again.")

        title = article.seo_title or article.title
        description = truncate_description(
            article.seo_description or article.excerpt or article.content
        )
        canonical = article_url(article.slug, article.language)
        image = absolute_url(article.featured_image_url or DEFAULT_IMAGE_PATH)
        author_name = (author.full_name or author.username) if author else None
        published = _iso(article.published_at)
        modified = _iso(article.updated_at) or published

        alternates: Dict[str, str] = {
            lang: article_url(article.slug, lang) for lang in sorted(set(versions))
        }
        if settings.default_locale in alternates:
            alternates["x-default"] = alternates[settings.default_locale]

        json_ld = {
            "@context": "https://schema.org",
            "@type": "Article",
            "headline": title,
            "description": description,
            "image": image,
            "datePublished": published,
            "dateModified": modified,
            "inLanguage": article.language,
            "author": {"@type": "Person", "name": author_name or settings.site_name},
            "publisher": {
                "@type": "Organization",
                "name": settings.site_name,
                "logo": {"@type": "ImageObject", "url": absolute_url(LOGO_PATH)},
            },
            "mainEntityOfPage": {"@type": "WebPage", "@id": canonical},
        }
        if article.seo_keywords or article.category:
            json_ld["keywords"] = ", ".join(_keywords(article))

        return ArticleMetadata(
            title=title,
            description=description,
            keywords=_keywords(article),
            canonical=canonical,
            alternates=alternates,
            open_graph=OpenGraph(
                title=title,
                description=description,
                url=canonical,
                site_name=settings.site_name,
                locale=OG_LOCALES.get(article.language, OG_LOCALES["en"]),
                images=[
                    OpenGraphImage(
                        url=image, width=OG_IMAGE_WIDTH, height=OG_IMAGE_HEIGHT, alt=title
                    )
                ],
                published_time=published,
                modified_time=modified,
                authors=[author_name] if author_name else [],
            ),
            twitter=TwitterCard(title=title, description=description, images=[image]),
            json_ld=json_ld,
        )

    # ── Sitemap / robots ──────────────────────────────────────────────────

    async def sitemap_entries(self, db: AsyncSession) -> List[SitemapEntry]:
        now = datetime.now(timezone.utc)
        entries = [
            SitemapEntry(settings.site_url, now, "daily", 1.0),
            SitemapEntry(f"{settings.site_url}/articles", now, "daily", 0.9),
            SitemapEntry(f"{settings.site_url}/about", now, "monthly", 0.5),
        ]
        try:
            result = await db.execute(
                select(Article.slug, Article.language, Article.updated_at, Article.published_at)
                .where(
                    Article.status == ArticleStatus.PUBLISHED.value,
                    Article.deleted_at.is_(None),
                )
                .order_by(Article.published_at.desc().nulls_last())
            )
        except SQLAlchemyError as e:
            logger.error("Database error building sitemap: %s", e, exc_info=True)
            raise DatabaseError(message="Could not build the sitemap. Please try again.")

        for slug, language, updated_at, published_at in result.all():
            entries.append(
                SitemapEntry(
                    article_url(slug, language),
                    updated_at or published_at or now,
                    "weekly",
                    0.8,
                )
            )
        return entries

    def render_sitemap(self, entries: List[SitemapEntry]) -> bytes:
        def tag(name: str) -> str:
            return f"{{{SITEMAP_NS}}}{name}"

        urlset = etree.Element(tag("urlset"), nsmap={None: SITEMAP_NS})
        for entry in entries:
            url = etree.SubElement(urlset, tag("url"))
            etree.SubElement(url, tag("loc")).text = entry.loc
            etree.SubElement(url, tag("lastmod")).text = _iso(entry.lastmod)
            etree.SubElement(url, tag("changefreq")).text = entry.changefreq
            etree.SubElement(url, tag("priority")).text = f"{entry.priority:.1f}"
        return etree.tostring(
            urlset, xml_declaration=True, encoding="UTF-8", pretty_print=True
        )

    def render_robots(self) -> str:
        lines = ["User-agent: *", "Allow: /"]
        lines += [f"Disallow: {path}" for path in ROBOTS_DISALLOW]
        lines += ["", f"Sitemap: {settings.site_url}/sitemap.xml", ""]
        return "\n".join(lines)


seo_service = SEOService()
