# storefront/models/content.py
# Модели контента WordPress в том виде, в каком их отдает WPGraphQL (camelCase).
from typing import List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class WPModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class WPImage(WPModel):
    source_url: str
    alt_text: str = ""


class WPFeaturedImage(WPModel):
    node: WPImage


class WPTerm(WPModel):
    id: str
    name: str
    slug: str
    description: Optional[str] = None
    count: Optional[int] = None


class WPTermConnection(WPModel):
    nodes: List[WPTerm] = []


class WPSeoImage(WPModel):
    source_url: str


class WPSeo(WPModel):
    """SEO-поля Yoast, как их отдает WPGraphQL."""
    title: Optional[str] = None
    meta_desc: Optional[str] = None
    opengraph_title: Optional[str] = None
    opengraph_description: Optional[str] = None
    opengraph_image: Optional[WPSeoImage] = None
    twitter_title: Optional[str] = None
    twitter_description: Optional[str] = None
    canonical: Optional[str] = None
    focus_keywords: Optional[List[str]] = None
    meta_robots_noindex: Optional[str] = None
    meta_robots_nofollow: Optional[str] = None


class WPAuthor(WPModel):
    id: Optional[str] = None
    name: str
    slug: Optional[str] = None


class WPAuthorEdge(WPModel):
    node: WPAuthor


class WPPost(WPModel):
    id: str
    database_id: Optional[int] = None
    title: str
    slug: str
    excerpt: Optional[str] = None
    content: Optional[str] = None
    date: str
    modified: Optional[str] = None
    featured_image: Optional[WPFeaturedImage] = None
    categories: Optional[WPTermConnection] = None
    tags: Optional[WPTermConnection] = None
    seo: Optional[WPSeo] = None
    author: Optional[WPAuthorEdge] = None


class WPPage(WPModel):
    id: str
    database_id: Optional[int] = None
    title: str
    slug: str
    uri: Optional[str] = None
    content: Optional[str] = None
    featured_image: Optional[WPFeaturedImage] = None
    seo: Optional[WPSeo] = None


class PageInfo(WPModel):
    has_next_page: bool = False
    has_previous_page: bool = False
    start_cursor: Optional[str] = None
    end_cursor: Optional[str] = None


class WPPostList(WPModel):
    page_info: PageInfo = PageInfo()
    nodes: List[WPPost] = []


class WPMenuItem(WPModel):
    id: str
    label: str
    url: str = ""
    path: str = ""
    parent_id: Optional[str] = None
    css_classes: Optional[List[str]] = None
    target: Optional[str] = None
    order: Optional[int] = None


class WPMenuItemWithChildren(WPMenuItem):
    children: List["WPMenuItemWithChildren"] = []
    active: bool = False
