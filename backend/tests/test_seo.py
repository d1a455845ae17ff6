"""
Inkwell Backend — SEO Service Tests
====================================

What we test:
    ✅ Description truncation on word boundaries
    ✅ Canonical / alternate URLs per language
    ✅ Article metadata (OpenGraph, Twitter, JSON-LD)
    ✅ Sitemap XML and robots.txt
"""

from datetime import datetime, timezone

import pytest
from lxml import etree

from inkwell.exceptions import NotFoundError
from inkwell.services.seo_service import (
    SITEMAP_NS,
    SEOService,
    SitemapEntry,
    absolute_url,
    article_url,
    truncate_description,
)


class TestHelpers:

    def test_short_description_untouched(self):
        assert truncate_description("  A calm   mind.  ") == "A calm mind."

    def test_long_description_cut_on_word_boundary(self):
        text = "breathing " * 40
        result = truncate_description(text, max_length=50)
        assert len(result) <= 50
        assert result.endswith("...")
        assert "breathin..." not in result

    def test_empty_description(self):
        assert truncate_description(None) == ""

    def test_article_url_default_locale_has_no_query(self):
        assert article_url("calm-mind", "th") == "https://example.test/articles/calm-mind"
        assert article_url("calm-mind", "en") == (
            "https://example.test/articles/calm-mind?lang=en"
        )

    def test_absolute_url(self):
        assert absolute_url("/images/a.jpg") == "https://example.test/images/a.jpg"
        assert absolute_url("https://cdn.test/a.jpg") == "https://cdn.test/a.jpg"


class TestArticleMetadata:

    def setup_method(self):
        self.service = SEOService()

    @pytest.mark.asyncio
    async def test_metadata_for_published_article(self, db, author, make_article):
        await make_article(
            author,
            status="published",
            slug="calm-mind",
            language="th",
            title="จิตสงบ",
            excerpt="บทนำสู่การทำสมาธิ",
            category="meditation",
        )
        await make_article(
            author,
            status="published",
            slug="calm-mind",
            language="en",
            title="A Calm Mind",
            excerpt="An introduction to meditation.",
            seo_keywords="meditation, breathing",
            featured_image_url="/images/calm.jpg",
        )

        meta = await self.service.build_article_metadata(db, "calm-mind", language="en")

        assert meta.title == "A Calm Mind"
        assert meta.description == "An introduction to meditation."
        assert meta.keywords == ["meditation", "breathing"]
        assert meta.canonical == "https://example.test/articles/calm-mind?lang=en"
        assert meta.alternates == {
            "en": "https://example.test/articles/calm-mind?lang=en",
            "th": "https://example.test/articles/calm-mind",
            "x-default": "https://example.test/articles/calm-mind",
        }
        assert meta.open_graph.locale == "en_US"
        assert meta.open_graph.images[0].url == "https://example.test/images/calm.jpg"
        assert meta.open_graph.images[0].width == 1200
        assert meta.open_graph.authors == ["Author"]
        assert meta.twitter.card == "summary_large_image"
        assert meta.json_ld["@type"] == "Article"
        assert meta.json_ld["inLanguage"] == "en"
        assert meta.json_ld["mainEntityOfPage"]["@id"] == meta.canonical

    @pytest.mark.asyncio
    async def test_metadata_does_not_count_views(self, db, author, make_article):
        article = await make_article(author, status="published", slug="calm-mind")

        await self.service.build_article_metadata(db, "calm-mind")
        await db.refresh(article)

        assert article.view_count == 0

    @pytest.mark.asyncio
    async def test_unpublished_article_has_no_metadata(self, db, author, make_article):
        await make_article(author, status="pending_approval", slug="draft-thoughts")

        with pytest.raises(NotFoundError):
            await self.service.build_article_metadata(db, "draft-thoughts")


class TestSitemap:

    def setup_method(self):
        self.service = SEOService()

    @pytest.mark.asyncio
    async def test_entries_include_static_pages_and_published_articles(
        self, db, author, make_article
    ):
        await make_article(author, status="published", slug="calm-mind")
        await make_article(author, status="draft", slug="not-yet")

        entries = await self.service.sitemap_entries(db)
        locs = [e.loc for e in entries]

        assert locs[:3] == [
            "https://example.test",
            "https://example.test/articles",
            "https://example.test/about",
        ]
        assert "https://example.test/articles/calm-mind" in locs
        assert not any("not-yet" in loc for loc in locs)
        article_entry = entries[locs.index("https://example.test/articles/calm-mind")]
        assert (article_entry.changefreq, article_entry.priority) == ("weekly", 0.8)

    def test_render_sitemap(self):
        entries = [
            SitemapEntry(
                "https://example.test/articles/calm-mind",
                datetime(2026, 1, 15, 8, 30, tzinfo=timezone.utc),
                "weekly",
                0.8,
            )
        ]

        xml = self.service.render_sitemap(entries)
        root = etree.fromstring(xml)

        assert xml.startswith(b"<?xml")
        assert root.tag == f"{{{SITEMAP_NS}}}urlset"
        ns = {"s": SITEMAP_NS}
        assert root.findtext("s:url/s:loc", namespaces=ns) == (
            "https://example.test/articles/calm-mind"
        )
        assert root.findtext("s:url/s:lastmod", namespaces=ns) == "2026-01-15T08:30:00+00:00"
        assert root.findtext("s:url/s:priority", namespaces=ns) == "0.8"

    def test_robots(self):
        robots = self.service.render_robots()
        assert "User-agent: *" in robots
        assert "Disallow: /api/" in robots
        assert "Disallow: /admin/" in robots
        assert "Sitemap: https://example.test/sitemap.xml" in robots
