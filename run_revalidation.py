# run_revalidation.py
"""
Отправляет один вебхук ревалидации на NEXTJS_REVALIDATE_URL.

Примеры:
    python run_revalidation.py --type post --slug hello-world
    python run_revalidation.py --type all --dry-run
"""
import argparse
import asyncio
import json
import logging
import sys

from storefront.core.config import settings
from storefront.models.revalidate import RevalidateContentType
from storefront.services.revalidation import RevalidationNotifier, build_webhook_payload, plan_revalidation

# Настраиваем логирование так же, как в main.py
log_level = settings.LOGGING_LEVEL.upper()
logging.basicConfig(
    level=log_level,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
logging.getLogger("httpx").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Send a content revalidation webhook")
    parser.add_argument(
        "--type",
        required=True,
        choices=[item.value for item in RevalidateContentType],
        help="Content type to revalidate",
    )
    parser.add_argument("--slug", default=None, help="Slug of the changed post, page or product")
    parser.add_argument("--dry-run", action="store_true", help="Print the request instead of sending it")
    return parser


async def send_revalidation(content_type: str, slug=None, dry_run: bool = False) -> bool:
    if dry_run:
        request = build_webhook_payload(
            content_type, slug, url=settings.NEXTJS_REVALIDATE_URL, secret=settings.REVALIDATE_SECRET
        )
        # Секрет в выводе не показываем
        request["headers"]["x-revalidate-secret"] = "***"
        plan = plan_revalidation(RevalidateContentType(content_type), slug)
        print(json.dumps({"request": request, "plan": plan.model_dump()}, ensure_ascii=False, indent=2))
        return True

    notifier = RevalidationNotifier(settings.NEXTJS_REVALIDATE_URL, settings.REVALIDATE_SECRET)
    try:
        return await notifier.send(content_type, slug)
    finally:
        await notifier.close()


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    ok = asyncio.run(send_revalidation(args.type, args.slug, args.dry_run))
    if not ok:
        logger.error("Revalidation webhook was not delivered.")
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
