# storefront/services/seo.py
"""
Генерация SEO-метаданных (Open Graph, Twitter Card, robots, canonical)
из полей Yoast SEO и структурированных данных Schema.org (JSON-LD).
"""
import json
import re
from typing import Any, Dict, Iterable, List, Optional

from storefront.models.content import WPPage, WPPost
from storefront.models.seo import (
    BreadcrumbItem,
    GeneratedMetadata,
    OpenGraph,
    Robots,
    SEOInput,
    TwitterCard,
)

SCHEMA_CONTEXT = "https://schema.org"
DESCRIPTION_MAX_LENGTH = 160

_TAG_RE = re.compile(r"<[^>]*>")


def strip_html_tags(html: Optional[str]) -> str:
    return _TAG_RE.sub("", html or "").strip()


def truncate_text(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    return text[: max_length - 3].strip() + "..."


def generate_seo_metadata(data: SEOInput) -> GeneratedMetadata:
    seo = data.seo

    raw_description = (seo.meta_desc if seo else None) or data.excerpt or ""
    description = truncate_text(strip_html_tags(raw_description), DESCRIPTION_MAX_LENGTH)
    title = (seo.title if seo else None) or data.title

    images: List[str] = []
    if seo and seo.opengraph_image and seo.opengraph_image.source_url:
        images.append(seo.opengraph_image.source_url)
    elif data.featured_image and data.featured_image.node.source_url:
        images.append(data.featured_image.node.source_url)

    # По умолчанию index/follow; запрещаем только явным noindex/nofollow
    should_index = not (seo and seo.meta_robots_noindex == "noindex")
    should_follow = not (seo and seo.meta_robots_nofollow == "nofollow")

    og_title = (seo.opengraph_title if seo else None) or title
    og_description = (seo.opengraph_description if seo else None) or description
    open_graph = OpenGraph(title=og_title, description=og_description, type=data.type, images=images)
    if data.type == "article":
        open_graph.published_time = data.published_time
        open_graph.modified_time = data.modified_time
        if data.author:
            open_graph.authors = [data.author]

    twitter = TwitterCard(
        card="summary_large_image" if images else "summary",
        title=(seo.twitter_title if seo else None) or og_title,
        description=(seo.twitter_description if seo else None) or og_description,
        images=images or None,
    )

    metadata = GeneratedMetadata(title=title, description=description, open_graph=open_graph, twitter=twitter)
    if not should_index or not should_follow:
        metadata.robots = Robots(index=should_index, follow=should_follow)
    if seo and seo.canonical:
        metadata.canonical = seo.canonical
    return metadata


def generate_post_metadata(post: WPPost) -> GeneratedMetadata:
    return generate_seo_metadata(
        SEOInput(
            seo=post.seo,
            title=post.title,
            excerpt=post.excerpt,
            featured_image=post.featured_image,
            slug=post.slug,
            type="article",
            published_time=post.date,
            modified_time=post.modified,
            author=post.author.node.name if post.author else None,
        )
    )


def generate_page_metadata(page: WPPage) -> GeneratedMetadata:
    return generate_seo_metadata(
        SEOInput(
            seo=page.seo,
            title=page.title,
            featured_image=page.featured_image,
            slug=page.slug,
            type="website",
        )
    )


# --- JSON-LD ---

def generate_article_schema(
    post: WPPost,
    site_url: str,
    site_name: str = "Website",
    publisher_logo: Optional[str] = None,
) -> Dict[str, Any]:
    site_url = site_url.rstrip('/')
    schema: Dict[str, Any] = {
        "@context": SCHEMA_CONTEXT,
        "@type": "Article",
        "headline": post.title,
        "datePublished": post.date,
    }
    if post.modified:
        schema["dateModified"] = post.modified
    if post.author:
        schema["author"] = {"@type": "Person", "name": post.author.node.name}

    publisher: Dict[str, Any] = {"@type": "Organization", "name": site_name, "url": site_url}
    if publisher_logo:
        publisher["logo"] = {"@type": "ImageObject", "url": publisher_logo}
    schema["publisher"] = publisher

    if post.featured_image and post.featured_image.node.source_url:
        schema["image"] = post.featured_image.node.source_url

    if post.seo and post.seo.meta_desc:
        schema["description"] = post.seo.meta_desc
    elif post.excerpt:
        schema["description"] = strip_html_tags(post.excerpt)

    schema["mainEntityOfPage"] = {"@type": "WebPage", "@id": f"{site_url}/blog/{post.slug}"}

    if post.categories and post.categories.nodes:
        schema["articleSection"] = [category.name for category in post.categories.nodes]
    if post.tags and post.tags.nodes:
        schema["keywords"] = [tag.name for tag in post.tags.nodes]
    return schema


def generate_web_page_schema(page: WPPage, site_url: str, site_name: str = "Website") -> Dict[str, Any]:
    site_url = site_url.rstrip('/')
    schema: Dict[str, Any] = {
        "@context": SCHEMA_CONTEXT,
        "@type": "WebPage",
        "name": page.title,
        "url": f"{site_url}/{page.slug}",
    }
    if page.seo and page.seo.meta_desc:
        schema["description"] = page.seo.meta_desc
    if page.featured_image and page.featured_image.node.source_url:
        schema["image"] = page.featured_image.node.source_url
    schema["isPartOf"] = {"@type": "WebSite", "name": site_name, "url": site_url}
    return schema


def generate_breadcrumb_schema(items: Iterable[BreadcrumbItem], site_url: str) -> Dict[str, Any]:
    site_url = site_url.rstrip('/')
    elements = []
    for position, item in enumerate(items, start=1):
        element: Dict[str, Any] = {"@type": "ListItem", "position": position, "name": item.name}
        if item.url:
            element["item"] = item.url if item.url.startswith("http") else f"{site_url}{item.url}"
        elements.append(element)
    return {"@context": SCHEMA_CONTEXT, "@type": "BreadcrumbList", "itemListElement": elements}


def render_json_ld(schema: Dict[str, Any]) -> str:
    """JSON для <script type="application/ld+json">; '</' экранируется, чтобы не закрыть тег."""
    return json.dumps(schema, ensure_ascii=False).replace("</", "<\\/")
