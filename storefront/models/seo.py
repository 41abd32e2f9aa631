# storefront/models/seo.py
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel

from storefront.models.content import WPFeaturedImage, WPSeo

ContentKind = Literal["article", "website"]


class SEOInput(BaseModel):
    seo: Optional[WPSeo] = None
    title: str
    excerpt: Optional[str] = None
    featured_image: Optional[WPFeaturedImage] = None
    slug: str
    type: ContentKind = "website"
    published_time: Optional[str] = None
    modified_time: Optional[str] = None
    author: Optional[str] = None


class OpenGraph(BaseModel):
    title: str
    description: str
    type: ContentKind
    images: List[str] = []
    published_time: Optional[str] = None
    modified_time: Optional[str] = None
    authors: Optional[List[str]] = None


class TwitterCard(BaseModel):
    card: Literal["summary_large_image", "summary"]
    title: str
    description: str
    images: Optional[List[str]] = None


class Robots(BaseModel):
    index: bool
    follow: bool


class GeneratedMetadata(BaseModel):
    title: str
    description: str
    open_graph: OpenGraph
    twitter: TwitterCard
    # robots присутствует только если отличается от index/follow
    robots: Optional[Robots] = None
    canonical: Optional[str] = None


class BreadcrumbItem(BaseModel):
    name: str
    url: Optional[str] = None


class ContentEnvelope(BaseModel):
    """Ответ контентных эндпоинтов: сама запись, метаданные и JSON-LD."""
    content: Dict[str, Any]
    metadata: GeneratedMetadata
    json_ld: List[Dict[str, Any]] = []
    # Готовое содержимое <script type="application/ld+json"> для каждой схемы
    json_ld_scripts: List[str] = []
