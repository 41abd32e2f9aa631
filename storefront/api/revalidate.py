# storefront/api/revalidate.py
"""
Вебхук ревалидации: WordPress/WooCommerce сообщает об изменении контента,
сервис сбрасывает соответствующие теги кэша.
"""
import logging
import time
from typing import Optional

from fastapi import APIRouter, Depends, Header, Request, status
from fastapi.responses import JSONResponse

from storefront.core.config import Settings
from storefront.dependencies import get_content_cache, get_settings
from storefront.models.revalidate import RevalidateContentType, RevalidateResponse
from storefront.services.content_cache import ContentCache
from storefront.services.revalidation import plan_revalidation
from storefront.utils.webhook_auth import validate_webhook_secret

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Revalidation"])

_VALID_TYPES = {item.value for item in RevalidateContentType}


def _message(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message})


@router.post("/revalidate", response_model=RevalidateResponse, response_model_exclude_none=True)
async def revalidate(
    request: Request,
    x_revalidate_secret: Optional[str] = Header(None),
    settings: Settings = Depends(get_settings),
    cache: ContentCache = Depends(get_content_cache),
):
    expected_secret = settings.REVALIDATE_SECRET
    if not expected_secret:
        logger.error("REVALIDATE_SECRET is not set")
        return _message(status.HTTP_500_INTERNAL_SERVER_ERROR, "Server configuration error")

    if not validate_webhook_secret(x_revalidate_secret, expected_secret):
        logger.warning("Revalidation request with invalid secret")
        return _message(status.HTTP_401_UNAUTHORIZED, "Invalid secret")

    try:
        body = await request.json()
    except ValueError as e:
        # JSONDecodeError и UnicodeDecodeError - оба ValueError
        logger.error(f"Revalidation error: {e}")
        return _message(status.HTTP_500_INTERNAL_SERVER_ERROR, "Error processing revalidation request")

    # Тело читается свободно: кроме type и slug поля не проверяются
    raw_type = body.get("type") if isinstance(body, dict) else None
    if not isinstance(raw_type, str) or raw_type not in _VALID_TYPES:
        return _message(status.HTTP_400_BAD_REQUEST, f"Invalid content type: {raw_type}")

    raw_slug = body.get("slug")
    slug = str(raw_slug) if raw_slug not in (None, "") else None

    content_type = RevalidateContentType(raw_type)
    plan = plan_revalidation(content_type, slug)
    removed = cache.invalidate_tags(plan.tags)

    logger.info(
        f"Revalidated: type={content_type.value}, slug={slug or 'none'}, "
        f"tags=[{', '.join(plan.tags)}], paths=[{', '.join(plan.paths)}], cache_entries={removed}"
    )
    return RevalidateResponse(
        revalidated=True,
        type=content_type,
        slug=slug,
        timestamp=int(time.time() * 1000),
    )
