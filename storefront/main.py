# storefront/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from storefront.api.revalidate import router as revalidate_router
from storefront.api.v1.router import api_router_v1
from storefront.core.config import settings
from storefront.services.content_cache import ContentCache
from storefront.services.revalidation import RevalidationNotifier
from storefront.services.woocommerce import WooCommerceService
from storefront.services.wordpress import WordPressClient

# --- Настройка логирования ---
log_level = settings.LOGGING_LEVEL.upper()
logging.basicConfig(
    level=log_level,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
# Уменьшаем шум от uvicorn и httpx на уровне INFO
logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
logging.getLogger("httpx").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)
logger.info(f"Starting application with log level: {log_level}")


# --- Lifespan для управления ресурсами ---
@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application startup: Initializing resources...")
    content_cache = ContentCache(default_ttl=settings.GRAPHQL_DEFAULT_REVALIDATE)
    wp_client = WordPressClient(
        settings.WORDPRESS_GRAPHQL_ENDPOINT,
        cache=content_cache,
        default_revalidate=settings.GRAPHQL_DEFAULT_REVALIDATE,
    )
    woo_service = WooCommerceService()
    notifier = RevalidationNotifier(settings.NEXTJS_REVALIDATE_URL, settings.REVALIDATE_SECRET)

    app.state.content_cache = content_cache
    app.state.wordpress_client = wp_client
    app.state.woocommerce_service = woo_service
    app.state.revalidation_notifier = notifier
    logger.info("Content cache, WordPress client, WooCommerce service and revalidation notifier initialized.")

    try:
        yield
    finally:
        logger.info("Application shutdown: Cleaning up resources...")
        await woo_service.close_client()
        await wp_client.close_client()
        await notifier.close()
        logger.info("Resources cleaned up successfully.")


# --- Создание экземпляра FastAPI ---
app = FastAPI(
    title=settings.PROJECT_NAME,
    version="1.0.0",
    description="API бизнес-правил headless-магазина на WordPress + WooCommerce.",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url=f"{settings.API_V1_STR}/openapi.json"
)

# --- Настройка CORS ---
origins = [
    settings.SITE_URL,
    "http://localhost:3000",  # Next.js dev server
    "http://127.0.0.1:3000",
]
origins = [origin.rstrip('/') for origin in origins if origin]
logger.info(f"Allowed CORS origins: {origins}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-WP-TotalPages", "X-WP-Total"]
)


# --- Обработчики ошибок ---
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Request validation error: {exc.errors()} for {request.method} {request.url}")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": "Dữ liệu đầu vào không hợp lệ.", "errors": jsonable_errors(exc.errors())},
    )


@app.exception_handler(ValidationError)
async def pydantic_validation_exception_handler(request: Request, exc: ValidationError):
    logger.error(f"Pydantic model validation error: {exc.errors()} for {request.method} {request.url}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Lỗi xác thực dữ liệu.", "errors": jsonable_errors(exc.errors())},
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled exception: {exc} for {request.method} {request.url}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Lỗi máy chủ nội bộ."},
    )


def jsonable_errors(errors):
    # ctx может содержать исключения, которые не сериализуются в JSON
    return [{key: value for key, value in error.items() if key != "ctx"} for error in errors]


# --- Подключение роутеров ---
app.include_router(api_router_v1, prefix=settings.API_V1_STR)
logger.info(f"Included API router at prefix: {settings.API_V1_STR}")

# Вебхук ревалидации живет вне версии API: /api/revalidate
app.include_router(revalidate_router, prefix="/api")


# --- Корневой эндпоинт ---
@app.get("/", tags=["Root"], summary="Health check")
async def read_root():
    """Простой эндпоинт для проверки работоспособности API."""
    return {"status": "ok", "project": settings.PROJECT_NAME}
