# storefront/services/revalidation.py
"""
Ревалидация кэша контента.

Входящая сторона: plan_revalidation() определяет, какие теги и пути
сбросить для типа контента. Исходящая сторона: RevalidationNotifier
отправляет вебхук ревалидации фронтенду при изменении данных магазина.
"""
import asyncio
import logging
import time
from typing import Any, Dict, List, Optional, Set

import httpx

from storefront.models.revalidate import RevalidateContentType, RevalidationPlan
from storefront.utils.webhook_auth import REVALIDATE_SECRET_HEADER

logger = logging.getLogger(__name__)

WEBHOOK_TIMEOUT_SECONDS = 5.0

ALL_TAGS = ["posts", "pages", "menu", "products", "inventory", "orders"]


def _product_plan(tags: List[str], slug: Optional[str]) -> RevalidationPlan:
    paths: List[str] = []
    if slug:
        tags.append(f"product-{slug}")
        paths.append(f"/shop/{slug}")
    paths.append("/shop")
    return RevalidationPlan(tags=tags, paths=paths)


def plan_revalidation(content_type: RevalidateContentType, slug: Optional[str] = None) -> RevalidationPlan:
    """Теги кэша и пути страниц, которые устаревают при изменении контента данного типа."""
    content_type = RevalidateContentType(content_type)

    if content_type == RevalidateContentType.POST:
        tags, paths = ["posts"], []
        if slug:
            tags.append(f"post-{slug}")
            paths.append(f"/blog/{slug}")
        paths.append("/blog")
        return RevalidationPlan(tags=tags, paths=paths)

    if content_type == RevalidateContentType.PAGE:
        if slug:
            return RevalidationPlan(tags=["pages", f"page-{slug}"], paths=[f"/{slug}"])
        return RevalidationPlan(tags=["pages"])

    if content_type == RevalidateContentType.MENU:
        return RevalidationPlan(tags=["menu"])

    if content_type == RevalidateContentType.PRODUCT:
        return _product_plan(["products"], slug)

    if content_type == RevalidateContentType.INVENTORY:
        return _product_plan(["products", "inventory"], slug)

    if content_type == RevalidateContentType.ORDER:
        return RevalidationPlan(tags=["orders"], paths=["/account/orders"])

    return RevalidationPlan(tags=list(ALL_TAGS))


def build_webhook_payload(
    content_type: str,
    slug: Optional[str] = None,
    data: Optional[Dict[str, Any]] = None,
    url: Optional[str] = None,
    secret: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Описание исходящего запроса ревалидации: url, заголовки и тело.
    Доп. данные (product_id, stock_status, ...) дописываются в тело поверх базовых полей.
    """
    body: Dict[str, Any] = {"type": content_type, "slug": slug, "timestamp": int(time.time())}
    body.update(data or {})
    return {
        "url": url,
        "headers": {
            "Content-Type": "application/json",
            REVALIDATE_SECRET_HEADER: secret or "",
        },
        "body": body,
    }


class RevalidationNotifier:
    """
    Отправляет вебхук ревалидации на NEXTJS_REVALIDATE_URL.
    Ошибки доставки только логируются: изменение данных не должно падать
    из-за недоступного фронтенда.
    """

    def __init__(
        self,
        url: Optional[str],
        secret: Optional[str],
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = WEBHOOK_TIMEOUT_SECONDS,
    ):
        self.url = url
        self.secret = secret
        self._client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))
        self._pending: Set[asyncio.Task] = set()

    @property
    def enabled(self) -> bool:
        return bool(self.url and self.secret)

    async def send(
        self,
        content_type: str,
        slug: Optional[str] = None,
        data: Optional[Dict[str, Any]] = None,
    ) -> bool:
        """Отправляет вебхук и ждет ответа. True, если фронтенд ответил 2xx."""
        if not self.secret:
            logger.warning(f"Revalidation webhook '{content_type}' skipped: secret is not configured")
            return False
        if not self.url:
            logger.warning(f"Revalidation webhook '{content_type}' skipped: NEXTJS_REVALIDATE_URL is not configured")
            return False

        request = build_webhook_payload(content_type, slug, data, url=self.url, secret=self.secret)
        try:
            response = await self._client.post(request["url"], json=request["body"], headers=request["headers"])
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"Revalidation webhook '{content_type}' rejected: {e.response.status_code} {e.response.text[:200]}")
            return False
        except httpx.RequestError as e:
            logger.error(f"Revalidation webhook '{content_type}' failed: {e}")
            return False

        logger.info(f"Sent {content_type} revalidation webhook for slug: {slug or 'none'}")
        return True

    def trigger(
        self,
        content_type: str,
        slug: Optional[str] = None,
        data: Optional[Dict[str, Any]] = None,
    ) -> Optional[asyncio.Task]:
        """
        Планирует отправку вебхука и сразу возвращает управление.
        Вызывать из работающего event loop. Без настроек ничего не планирует.
        """
        if not self.enabled:
            logger.debug(f"Revalidation webhook '{content_type}' not scheduled: notifier disabled")
            return None
        task = asyncio.get_running_loop().create_task(self.send(content_type, slug, data))
        # Держим ссылку, иначе задача может быть собрана GC до завершения
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def close(self) -> None:
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)
        await self._client.aclose()
        logger.info("Revalidation HTTP client closed.")
