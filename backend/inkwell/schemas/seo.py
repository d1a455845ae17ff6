"""
Inkwell Backend — SEO Metadata Schemas
=======================================

Shape of GET /api/articles/{slug}/metadata. The frontend copies these
values straight into <head>: OpenGraph and Twitter card tags, hreflang
alternates and a schema.org JSON-LD block.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class OpenGraphImage(BaseModel):
    url: str
    width: int = 1200
    height: int = 630
    alt: str


class OpenGraph(BaseModel):
    type: str = "article"
    title: str
    description: str
    url: str
    site_name: str
    locale: str
    images: List[OpenGraphImage]
    published_time: Optional[str] = None
    modified_time: Optional[str] = None
    authors: List[str] = Field(default_factory=list)


class TwitterCard(BaseModel):
    card: str = "summary_large_image"
    title: str
    description: str
    images: List[str]


class ArticleMetadata(BaseModel):
    title: str
    description: str
    keywords: List[str] = Field(default_factory=list)
    canonical: str
    alternates: Dict[str, str] = Field(
        default_factory=dict, description="hreflang → URL of each language version"
    )
    open_graph: OpenGraph
    twitter: TwitterCard
    json_ld: Dict[str, Any]
