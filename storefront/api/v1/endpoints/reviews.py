# storefront/api/v1/endpoints/reviews.py
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from storefront.dependencies import get_woocommerce_service
from storefront.models.review import ProductReviews, ReviewInput, ReviewSubmissionResult
from storefront.services.reviews import (
    is_verified_purchase,
    review_from_woocommerce,
    summarize_ratings,
    validate_review_submission,
)
from storefront.services.woocommerce import WooCommerceService, WooCommerceServiceError

logger = logging.getLogger(__name__)
router = APIRouter()


class ReviewSubmission(BaseModel):
    rating: Optional[int] = None
    content: str = ""
    author_name: str = ""
    author_email: str = ""


@router.get(
    "/{product_id}/reviews",
    response_model=ProductReviews,
    summary="Đánh giá sản phẩm và điểm trung bình",
)
async def get_product_reviews(
    product_id: int,
    wc_service: WooCommerceService = Depends(get_woocommerce_service),
):
    try:
        raw_reviews = await wc_service.get_product_reviews(product_id)
    except WooCommerceServiceError as e:
        raise HTTPException(status_code=e.status_code or status.HTTP_503_SERVICE_UNAVAILABLE, detail=e.message)

    reviews = [review_from_woocommerce(item) for item in raw_reviews]
    return ProductReviews(product_id=product_id, summary=summarize_ratings(reviews), reviews=reviews)


@router.post(
    "/{product_id}/reviews",
    response_model=ReviewSubmissionResult,
    status_code=status.HTTP_201_CREATED,
    summary="Gửi đánh giá sản phẩm",
)
async def submit_product_review(
    product_id: int,
    payload: ReviewSubmission,
    wc_service: WooCommerceService = Depends(get_woocommerce_service),
):
    """
    Новый отзыв проверяется и сохраняется в WooCommerce со статусом hold.
    Отметка "подтвержденная покупка" ставится по завершенным заказам с этим email.
    """
    result = validate_review_submission(ReviewInput(product_id=product_id, **payload.model_dump()))
    if not result.success:
        logger.info(f"Review for product {product_id} rejected: {result.error_code}")
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=result.model_dump(mode="json"))

    review = result.review
    try:
        orders, _ = await wc_service.get_orders(search=review.reviewer_email, status="completed", per_page=100)
        review.verified = is_verified_purchase(review.reviewer_email, product_id, orders or [])
        created = await wc_service.create_product_review(review)
    except WooCommerceServiceError as e:
        raise HTTPException(status_code=e.status_code or status.HTTP_503_SERVICE_UNAVAILABLE, detail=e.message)

    stored = review_from_woocommerce(created)
    stored.verified = stored.verified or review.verified
    logger.info(f"Review {stored.id} for product {product_id} stored with status {stored.status.value}")
    return result.model_copy(update={"review": stored})
