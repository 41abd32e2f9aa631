# storefront/utils/webhook_auth.py
import hmac
import logging
from typing import Optional

logger = logging.getLogger(__name__)

REVALIDATE_SECRET_HEADER = "x-revalidate-secret"


def validate_webhook_secret(secret_header: Optional[str], expected_secret: str) -> bool:
    """
    Проверяет секрет вебхука ревалидации.

    Принимает только точное совпадение: с учетом регистра, без обрезки пробелов.
    Отсутствующий или пустой заголовок отклоняется.
    """
    if not secret_header or not expected_secret:
        return False
    # compare_digest на байтах: строки с не-ASCII символами тоже допустимы
    return hmac.compare_digest(secret_header.encode('utf-8'), expected_secret.encode('utf-8'))
