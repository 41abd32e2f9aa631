# storefront/models/revalidate.py
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel


class RevalidateContentType(str, Enum):
    POST = "post"
    PAGE = "page"
    MENU = "menu"
    PRODUCT = "product"
    INVENTORY = "inventory"
    ORDER = "order"
    ALL = "all"


class RevalidateResponse(BaseModel):
    revalidated: bool
    type: RevalidateContentType
    slug: Optional[str] = None
    timestamp: int


class RevalidationPlan(BaseModel):
    tags: List[str] = []
    paths: List[str] = []
