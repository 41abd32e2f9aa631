# storefront/models/review.py
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel


class ReviewStatus(str, Enum):
    APPROVED = "APPROVED"
    PENDING = "PENDING"
    SPAM = "SPAM"
    TRASH = "TRASH"


class Review(BaseModel):
    id: Optional[int] = None
    product_id: Optional[int] = None
    rating: int
    status: ReviewStatus = ReviewStatus.PENDING
    reviewer: str = ""
    reviewer_email: str = ""
    review: str = ""
    verified: bool = False
    date_created: Optional[str] = None


class RatingSummary(BaseModel):
    average_rating: float
    review_count: int


class ProductReviews(BaseModel):
    product_id: int
    summary: RatingSummary
    reviews: List[Review] = []


class ReviewInput(BaseModel):
    product_id: Optional[int] = None
    rating: Optional[int] = None
    content: str = ""
    author_name: str = ""
    author_email: str = ""


class ReviewSubmissionResult(BaseModel):
    success: bool
    error_code: Optional[str] = None
    message: str
    review: Optional[Review] = None
