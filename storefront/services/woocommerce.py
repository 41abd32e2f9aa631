# storefront/services/woocommerce.py
import logging
from typing import Any, Dict, List, Optional, Tuple, Union

import httpx
from httpx import Headers
from pydantic import BaseModel

from storefront.core.config import settings
from storefront.models.review import Review, ReviewStatus

logger = logging.getLogger(__name__)

# Статус отзыва -> значение поля status в wc/v3/products/reviews
_REVIEW_STATUS_TO_WC = {
    ReviewStatus.APPROVED: "approved",
    ReviewStatus.PENDING: "hold",
    ReviewStatus.SPAM: "spam",
    ReviewStatus.TRASH: "trash",
}


class WooCommerceServiceError(Exception):
    """Базовый класс для ошибок сервиса WooCommerce."""
    def __init__(self, message="Ошибка при взаимодействии с WooCommerce API", status_code=None, details=None):
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class WooCommerceService:
    """
    Асинхронный сервис для взаимодействия с WooCommerce REST API.
    """
    def __init__(
        self,
        base_url: Optional[str] = None,
        consumer_key: Optional[str] = None,
        consumer_secret: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = (base_url or settings.WOOCOMMERCE_BASE_URL).rstrip('/')
        self.auth = (
            consumer_key if consumer_key is not None else settings.WOOCOMMERCE_KEY or "",
            consumer_secret if consumer_secret is not None else settings.WOOCOMMERCE_SECRET or "",
        )
        if client is None:
            timeouts = httpx.Timeout(10.0, read=20.0, write=10.0, connect=5.0)
            client = httpx.AsyncClient(base_url=self.base_url, auth=self.auth, timeout=timeouts)
        self._client = client
        logger.info(f"WooCommerceService initialized for URL: {self.base_url}")

    async def close_client(self):
        """Закрывает httpx клиент."""
        if self._client:
            await self._client.aclose()
            logger.info("WooCommerce HTTP client closed.")

    async def _request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict] = None,
        json_data: Optional[Union[Dict, BaseModel]] = None
    ) -> Tuple[Optional[Any], Optional[Headers]]:
        """
        Внутренний метод для выполнения запросов к API с обработкой ошибок.
        Возвращает кортеж (данные_ответа, заголовки_ответа) при успехе или вызывает исключение.
        """
        payload: Optional[Dict] = None
        if isinstance(json_data, BaseModel):
            payload = json_data.model_dump(exclude_none=True)
        elif json_data is not None:
            payload = json_data

        logger.debug(f"Requesting {method} {endpoint} | Params: {params} | Payload: {payload!r}")

        try:
            response = await self._client.request(method, endpoint.lstrip('/'), params=params, json=payload)
            response.raise_for_status()

            if response.status_code == 204:
                return True, response.headers

            content_type = response.headers.get("Content-Type", "")
            if "application/json" not in content_type:
                logger.warning(f"Unexpected Content-Type '{content_type}' for {method} {endpoint}. Status: {response.status_code}")
                return response.text, response.headers
            try:
                return response.json(), response.headers
            except ValueError as json_err:
                logger.error(f"Failed to decode JSON response for {method} {endpoint}. Response text: {response.text[:500]}")
                raise WooCommerceServiceError(
                    "Ошибка декодирования JSON ответа от WooCommerce",
                    status_code=response.status_code,
                    details=response.text,
                ) from json_err

        except httpx.HTTPStatusError as e:
            error_status_code = e.response.status_code
            error_message = f"HTTP ошибка {error_status_code} от WooCommerce API"
            details: Any = e.response.text
            try:
                wc_error = e.response.json()
                error_message = wc_error.get("message", error_message)
                details = wc_error.get("data", wc_error)
                logger.error(f"WooCommerce API error: {error_status_code} {wc_error.get('code', 'unknown_error_code')} - {error_message} for {e.request.url}")
            except (ValueError, AttributeError):
                logger.error(f"HTTP error: {error_status_code} for {e.request.url}. Response text: {e.response.text[:500]}")
            raise WooCommerceServiceError(
                message=f"Ошибка WooCommerce: {error_message}",
                status_code=error_status_code,
                details=details,
            ) from e
        except httpx.TimeoutException as e:
            logger.error(f"Request timeout: {e} for {method} {endpoint}")
            raise WooCommerceServiceError("Превышен таймаут запроса к WooCommerce API") from e
        except httpx.RequestError as e:
            logger.error(f"Network error: {e} for {method} {endpoint}")
            raise WooCommerceServiceError("Ошибка сети при подключении к WooCommerce API") from e

    # --- Купоны ---

    async def get_coupon_by_code(self, code: str) -> Optional[Dict]:
        """Купон по коду или None, если такого нет."""
        if not code:
            return None
        data, _ = await self._request("GET", "coupons", params={"code": code})
        if isinstance(data, list) and data:
            return data[0]
        if not isinstance(data, list):
            logger.error(f"Unexpected data type for coupon '{code}': {type(data)}")
        return None

    # --- Заказы ---

    async def get_order(self, order_id: int) -> Optional[Dict]:
        try:
            data, _ = await self._request("GET", f"orders/{order_id}")
        except WooCommerceServiceError as e:
            if e.status_code == 404:
                return None
            raise
        if isinstance(data, dict):
            return data
        logger.error(f"Unexpected data type for order {order_id}: {type(data)}")
        return None

    async def get_orders(
        self,
        page: int = 1,
        per_page: int = 10,
        status: Optional[Union[str, List[str]]] = None,
        customer_id: Optional[int] = None,
        search: Optional[str] = None,
        **kwargs,
    ) -> Tuple[Optional[List[Dict]], Optional[Headers]]:
        """Список заказов и заголовки ответа (x-wp-total, x-wp-totalpages для пагинации)."""
        params: Dict[str, Any] = {
            'page': page,
            'per_page': per_page,
            'customer': customer_id,
            'search': search,
            **kwargs,
        }
        if isinstance(status, list):
            params['status'] = ','.join(status)
        elif isinstance(status, str) and status != 'any':
            params['status'] = status

        params = {k: v for k, v in params.items() if v is not None}
        logger.info(f"Fetching orders with params: {params}")
        return await self._request("GET", "orders", params=params)

    async def update_order_status(self, order_id: int, new_status: str) -> Dict:
        logger.info(f"Attempting to update status for order ID {order_id} to '{new_status}'")
        data, _ = await self._request("PUT", f"orders/{order_id}", json_data={"status": new_status})
        if isinstance(data, dict):
            logger.info(f"Order ID {order_id} status updated successfully to '{new_status}'")
            return data
        logger.error(f"Failed to update order status for {order_id}. Received unexpected response: {data}")
        raise WooCommerceServiceError(f"Не удалось обновить статус заказа {order_id} или получен некорректный ответ")

    async def mark_order_paid(
        self,
        order_id: int,
        transaction_id: Optional[str] = None,
        payment_method: Optional[str] = None,
    ) -> Dict:
        """Переводит заказ в processing и отмечает его оплаченным (set_paid)."""
        payload: Dict[str, Any] = {"status": "processing", "set_paid": True}
        if transaction_id:
            payload["transaction_id"] = transaction_id
        if payment_method:
            payload["payment_method"] = payment_method
        logger.info(f"Marking order {order_id} as paid (transaction {transaction_id})")
        data, _ = await self._request("PUT", f"orders/{order_id}", json_data=payload)
        if not isinstance(data, dict):
            raise WooCommerceServiceError(f"Не удалось отметить заказ {order_id} оплаченным")
        return data

    async def add_order_note(self, order_id: int, note: str, customer_note: bool = False) -> Dict:
        data, _ = await self._request(
            "POST",
            f"orders/{order_id}/notes",
            json_data={"note": note, "customer_note": customer_note},
        )
        if not isinstance(data, dict):
            raise WooCommerceServiceError(f"Не удалось добавить заметку к заказу {order_id}")
        return data

    # --- Отзывы ---

    async def get_product_reviews(
        self,
        product_id: int,
        status: str = "approved",
        per_page: int = 100,
        page: int = 1,
    ) -> List[Dict]:
        params = {"product": product_id, "status": status, "per_page": per_page, "page": page}
        data, _ = await self._request("GET", "products/reviews", params=params)
        if isinstance(data, list):
            return data
        logger.error(f"Unexpected data type for reviews of product {product_id}: {type(data)}")
        return []

    async def create_product_review(self, review: Review) -> Dict:
        """Создает отзыв. Статус берется из модели (новые отзывы приходят как PENDING -> hold)."""
        payload = {
            "product_id": review.product_id,
            "review": review.review,
            "reviewer": review.reviewer,
            "reviewer_email": review.reviewer_email,
            "rating": review.rating,
            "status": _REVIEW_STATUS_TO_WC[review.status],
        }
        logger.info(f"Creating review for product {review.product_id} by {review.reviewer_email}")
        data, _ = await self._request("POST", "products/reviews", json_data=payload)
        if not isinstance(data, dict):
            raise WooCommerceServiceError("Не удалось создать отзыв или получен некорректный ответ")
        return data

    # --- Товары ---

    async def get_product(self, product_id: int) -> Optional[Dict]:
        try:
            data, _ = await self._request("GET", f"products/{product_id}")
        except WooCommerceServiceError as e:
            if e.status_code == 404:
                return None
            raise
        if isinstance(data, dict):
            return data
        logger.error(f"Unexpected data type for product {product_id}: {type(data)}")
        return None

    async def get_product_variations(self, product_id: int, per_page: int = 100) -> List[Dict]:
        data, _ = await self._request("GET", f"products/{product_id}/variations", params={"per_page": per_page})
        if isinstance(data, list):
            return data
        logger.error(f"Unexpected data type for variations of product {product_id}: {type(data)}")
        return []

    async def update_product_stock_status(self, product_id: int, stock_status: str) -> Dict:
        logger.info(f"Updating stock status for product {product_id} to '{stock_status}'")
        data, _ = await self._request("PUT", f"products/{product_id}", json_data={"stock_status": stock_status})
        if not isinstance(data, dict):
            raise WooCommerceServiceError(f"Не удалось обновить статус наличия товара {product_id}")
        return data
