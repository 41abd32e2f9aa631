# storefront/api/v1/endpoints/content.py
import logging
from typing import Any, Dict, List, NoReturn, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from storefront.core.config import Settings
from storefront.dependencies import get_settings, get_wordpress_client
from storefront.models.content import WPMenuItemWithChildren, WPPage, WPPostList
from storefront.models.seo import BreadcrumbItem, ContentEnvelope
from storefront.services.menu import build_menu_tree, mark_active_items
from storefront.services.seo import (
    generate_article_schema,
    generate_breadcrumb_schema,
    generate_page_metadata,
    generate_post_metadata,
    generate_web_page_schema,
    render_json_ld,
)
from storefront.services.wordpress import WordPressAPIError, WordPressClient, WordPressResponseShapeError

logger = logging.getLogger(__name__)
router = APIRouter()


def _raise_upstream_error(e: WordPressAPIError) -> NoReturn:
    if isinstance(e, WordPressResponseShapeError):
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Máy chủ nội dung trả về dữ liệu không hợp lệ.")
    if e.is_network_error():
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Không thể kết nối tới máy chủ nội dung.")
    raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=f"Lỗi máy chủ nội dung: {e.message}")


def _envelope(content, metadata, schemas: List[Dict[str, Any]]) -> ContentEnvelope:
    return ContentEnvelope(
        content=content.model_dump(),
        metadata=metadata,
        json_ld=schemas,
        json_ld_scripts=[render_json_ld(schema) for schema in schemas],
    )


@router.get("/posts", response_model=WPPostList, response_model_by_alias=False, summary="Danh sách bài viết")
async def list_posts(
    first: int = Query(10, ge=1, le=100),
    after: Optional[str] = Query(None, description="Курсор пагинации (endCursor предыдущей страницы)"),
    wp_client: WordPressClient = Depends(get_wordpress_client),
):
    try:
        return await wp_client.get_posts(first=first, after=after)
    except WordPressAPIError as e:
        _raise_upstream_error(e)


@router.get("/posts/{slug}", response_model=ContentEnvelope, summary="Bài viết kèm SEO và JSON-LD")
async def get_post(
    slug: str,
    wp_client: WordPressClient = Depends(get_wordpress_client),
    settings: Settings = Depends(get_settings),
):
    try:
        post = await wp_client.get_post_by_slug(slug)
    except WordPressAPIError as e:
        _raise_upstream_error(e)
    if post is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Không tìm thấy bài viết '{slug}'.")

    breadcrumbs = [
        BreadcrumbItem(name="Trang chủ", url="/"),
        BreadcrumbItem(name="Blog", url="/blog"),
        BreadcrumbItem(name=post.title),
    ]
    return _envelope(post, generate_post_metadata(post), [
        generate_article_schema(post, settings.SITE_ROOT, settings.SITE_NAME, settings.PUBLISHER_LOGO_URL),
        generate_breadcrumb_schema(breadcrumbs, settings.SITE_ROOT),
    ])


@router.get("/pages", response_model=List[WPPage], response_model_by_alias=False, summary="Danh sách trang")
async def list_pages(
    first: int = Query(100, ge=1, le=100),
    wp_client: WordPressClient = Depends(get_wordpress_client),
):
    try:
        return await wp_client.get_pages(first=first)
    except WordPressAPIError as e:
        _raise_upstream_error(e)


@router.get("/pages/{slug}", response_model=ContentEnvelope, summary="Trang kèm SEO và JSON-LD")
async def get_page(
    slug: str,
    wp_client: WordPressClient = Depends(get_wordpress_client),
    settings: Settings = Depends(get_settings),
):
    try:
        page = await wp_client.get_page_by_slug(slug)
    except WordPressAPIError as e:
        _raise_upstream_error(e)
    if page is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Không tìm thấy trang '{slug}'.")

    breadcrumbs = [BreadcrumbItem(name="Trang chủ", url="/"), BreadcrumbItem(name=page.title)]
    return _envelope(page, generate_page_metadata(page), [
        generate_web_page_schema(page, settings.SITE_ROOT, settings.SITE_NAME),
        generate_breadcrumb_schema(breadcrumbs, settings.SITE_ROOT),
    ])


@router.get(
    "/menu",
    response_model=List[WPMenuItemWithChildren],
    response_model_by_alias=False,
    summary="Cây menu",
)
async def get_menu(
    location: str = Query("PRIMARY", description="Расположение меню в теме (MenuLocationEnum)"),
    current_path: Optional[str] = Query(None, description="Текущий путь страницы для подсветки пункта меню"),
    wp_client: WordPressClient = Depends(get_wordpress_client),
):
    try:
        items = await wp_client.get_menu_items(location)
    except WordPressAPIError as e:
        _raise_upstream_error(e)
    tree = build_menu_tree(items)
    if current_path is not None:
        mark_active_items(tree, current_path)
    return tree
