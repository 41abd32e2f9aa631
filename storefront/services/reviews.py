# storefront/services/reviews.py
import logging
import re
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterable, List, Union

from storefront.models.review import (
    RatingSummary,
    Review,
    ReviewInput,
    ReviewStatus,
    ReviewSubmissionResult,
)

logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

# Статусы комментариев WordPress/WooCommerce -> статус отзыва
_WC_REVIEW_STATUSES: Dict[str, ReviewStatus] = {
    "approved": ReviewStatus.APPROVED,
    "1": ReviewStatus.APPROVED,
    "hold": ReviewStatus.PENDING,
    "pending": ReviewStatus.PENDING,
    "unapproved": ReviewStatus.PENDING,
    "0": ReviewStatus.PENDING,
    "spam": ReviewStatus.SPAM,
    "trash": ReviewStatus.TRASH,
}


def _approved(reviews: Iterable[Review]) -> List[Review]:
    return [
        review for review in reviews
        if review.status == ReviewStatus.APPROVED and MIN_RATING <= review.rating <= MAX_RATING
    ]


def calculate_average_rating(reviews: Iterable[Review]) -> float:
    """
    Средний рейтинг по одобренным отзывам с оценкой 1..5,
    округленный до одного знака (половина вверх). Без отзывов - 0.0.
    """
    approved = _approved(reviews)
    if not approved:
        return 0.0
    mean = Decimal(sum(review.rating for review in approved)) / Decimal(len(approved))
    return float(mean.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def get_approved_review_count(reviews: Iterable[Review]) -> int:
    return len(_approved(reviews))


def summarize_ratings(reviews: Iterable[Review]) -> RatingSummary:
    reviews = list(reviews)
    return RatingSummary(
        average_rating=calculate_average_rating(reviews),
        review_count=get_approved_review_count(reviews),
    )


def review_status_from_woocommerce(value: Union[str, int, None]) -> ReviewStatus:
    if value is None:
        return ReviewStatus.PENDING
    return _WC_REVIEW_STATUSES.get(str(value).lower(), ReviewStatus.PENDING)


def review_from_woocommerce(data: Dict[str, Any]) -> Review:
    """Преобразует отзыв из wc/v3/products/reviews в модель Review."""
    return Review(
        id=data.get('id'),
        product_id=data.get('product_id'),
        rating=int(data.get('rating') or 0),
        status=review_status_from_woocommerce(data.get('status')),
        reviewer=data.get('reviewer') or '',
        reviewer_email=data.get('reviewer_email') or '',
        review=data.get('review') or '',
        verified=bool(data.get('verified', False)),
        date_created=data.get('date_created'),
    )


def _reject(error_code: str, message: str) -> ReviewSubmissionResult:
    return ReviewSubmissionResult(success=False, error_code=error_code, message=message)


def validate_review_submission(data: ReviewInput) -> ReviewSubmissionResult:
    """
    Проверяет новый отзыв. Принятый отзыв всегда получает статус PENDING
    и ждет модерации администратором.
    """
    if not data.product_id or data.product_id <= 0:
        return _reject("missing_product_id", "Thiếu mã sản phẩm.")
    if data.rating is None or not (MIN_RATING <= data.rating <= MAX_RATING):
        return _reject("invalid_rating", "Đánh giá phải từ 1 đến 5 sao.")
    if not data.content.strip():
        return _reject("missing_content", "Vui lòng nhập nội dung đánh giá.")
    if not data.author_name.strip():
        return _reject("missing_author_name", "Vui lòng nhập tên của bạn.")
    if not data.author_email or not _EMAIL_RE.match(data.author_email.strip()):
        return _reject("invalid_email", "Vui lòng nhập email hợp lệ.")

    review = Review(
        product_id=data.product_id,
        rating=data.rating,
        status=ReviewStatus.PENDING,
        reviewer=data.author_name.strip(),
        reviewer_email=data.author_email.strip(),
        review=data.content.strip(),
    )
    return ReviewSubmissionResult(
        success=True,
        message="Đánh giá đã được gửi và đang chờ duyệt.",
        review=review,
    )


def is_verified_purchase(email: str, product_id: int, orders: Iterable[Dict[str, Any]]) -> bool:
    """
    True, если у покупателя с этим email есть завершенный заказ с товаром
    (совпадение по product_id или variation_id).
    """
    if not email or not product_id:
        return False
    email = email.strip().lower()
    for order in orders:
        if order.get('status') != 'completed':
            continue
        order_email = ((order.get('billing') or {}).get('email') or '').strip().lower()
        if order_email != email:
            continue
        for item in order.get('line_items') or []:
            if item.get('product_id') == product_id or item.get('variation_id') == product_id:
                return True
    return False
