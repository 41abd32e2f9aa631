# storefront/core/config.py
import os
import logging
from typing import Any, Dict, Mapping, Optional
from urllib.parse import urlparse

from dotenv import load_dotenv
from pydantic import BaseModel, ValidationError, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()

logger = logging.getLogger(__name__)

MIN_REVALIDATE_SECRET_LENGTH = 32


def _require_url(value: str, field_name: str) -> str:
    parsed = urlparse(value or "")
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError(f"{field_name} must be a valid URL")
    return value


class Settings(BaseSettings):
    PROJECT_NAME: str = "Headless Storefront API"
    API_V1_STR: str = "/api/v1"
    LOGGING_LEVEL: str = os.getenv("LOGGING_LEVEL", "INFO")

    # --- WordPress / WPGraphQL ---
    WORDPRESS_GRAPHQL_ENDPOINT: str
    WORDPRESS_API_URL: str
    GRAPHQL_DEFAULT_REVALIDATE: int = 60

    # --- Ревалидация контента ---
    REVALIDATE_SECRET: str
    NEXTJS_REVALIDATE_URL: Optional[str] = None

    # --- Сайт (SEO, JSON-LD) ---
    SITE_URL: str
    SITE_NAME: str = "Website"
    PUBLISHER_LOGO_URL: Optional[str] = None

    # --- WooCommerce REST ---
    WOOCOMMERCE_URL: Optional[str] = None
    WOOCOMMERCE_KEY: Optional[str] = None
    WOOCOMMERCE_SECRET: Optional[str] = None
    WOOCOMMERCE_API_VERSION: str = "wc/v3"
    ADMIN_API_KEY: Optional[str] = None

    # --- Доставка ---
    FREE_SHIPPING_THRESHOLD: int = 500000

    # --- Платежные шлюзы ---
    VNPAY_TMN_CODE: Optional[str] = None
    VNPAY_HASH_SECRET: Optional[str] = None
    MOMO_PARTNER_CODE: Optional[str] = None
    MOMO_ACCESS_KEY: Optional[str] = None
    MOMO_SECRET_KEY: Optional[str] = None

    @field_validator("WORDPRESS_GRAPHQL_ENDPOINT", "WORDPRESS_API_URL", "SITE_URL")
    @classmethod
    def _validate_urls(cls, value: str, info) -> str:
        return _require_url(value, info.field_name)

    @field_validator("REVALIDATE_SECRET")
    @classmethod
    def _validate_secret(cls, value: str) -> str:
        if len(value) < MIN_REVALIDATE_SECRET_LENGTH:
            raise ValueError(f"REVALIDATE_SECRET must be at least {MIN_REVALIDATE_SECRET_LENGTH} characters")
        return value

    # --- Вычисляемые поля ---
    @computed_field(return_type=str)
    @property
    def WOOCOMMERCE_BASE_URL(self) -> str:
        """Базовый URL WooCommerce REST API. Если WOOCOMMERCE_URL не задан, берется WORDPRESS_API_URL."""
        root = (self.WOOCOMMERCE_URL or self.WORDPRESS_API_URL).rstrip('/')
        # WORDPRESS_API_URL может уже указывать на /wp-json
        if root.endswith("/wp-json"):
            return f"{root}/{self.WOOCOMMERCE_API_VERSION}"
        return f"{root}/wp-json/{self.WOOCOMMERCE_API_VERSION}"

    @property
    def SITE_ROOT(self) -> str:
        return self.SITE_URL.rstrip('/')

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore'
    )


class EnvValidationResult(BaseModel):
    success: bool
    data: Optional[Settings] = None
    error: Optional[str] = None


def validate_env(env_vars: Mapping[str, Optional[str]]) -> EnvValidationResult:
    """
    Проверяет набор переменных окружения без выброса исключения.
    Переданные значения перекрывают окружение процесса.
    Используется скриптами и тестами; сам сервис создает settings при импорте.
    """
    values: Dict[str, Any] = {k: v for k, v in env_vars.items() if v is not None}
    try:
        # .env не читаем
        data = Settings(_env_file=None, **values)
    except ValidationError as e:
        lines = [f"  - {'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()]
        return EnvValidationResult(
            success=False,
            error="Environment validation failed:\n" + "\n".join(lines) + "\n\nPlease check your .env file.",
        )
    return EnvValidationResult(success=True, data=data)


class EnvValidationError(RuntimeError):
    """Окружение не прошло проверку при старте; текст - отчет validate_env."""
    pass


def load_settings() -> Settings:
    """Создает settings из окружения процесса (.env уже загружен load_dotenv)."""
    result = validate_env({})
    if not result.success:
        raise EnvValidationError(result.error)
    return result.data


settings = load_settings()

if settings.WOOCOMMERCE_KEY is None or settings.WOOCOMMERCE_SECRET is None:
    logger.warning("WooCommerce REST credentials are not set. Coupon, order and review endpoints will fail.")
if not settings.NEXTJS_REVALIDATE_URL:
    logger.warning("NEXTJS_REVALIDATE_URL is not set. Outbound revalidation webhooks are disabled.")
if not (settings.VNPAY_TMN_CODE and settings.VNPAY_HASH_SECRET):
    logger.info("VNPay credentials are not configured.")
