# storefront/models/common.py
from pydantic import BaseModel
from typing import Optional, Any


class MetaData(BaseModel):
    """Модель для метаданных WooCommerce."""
    id: Optional[int] = None
    key: str
    value: Any


class Address(BaseModel):
    """Адрес биллинга/доставки в формате WooCommerce (address_1, address_2)."""
    first_name: str = ""
    last_name: str = ""
    company: str = ""
    address_1: str = ""
    address_2: str = ""
    city: str = ""
    state: str = ""
    postcode: str = ""
    country: str = ""
    # email и phone бывают только у биллинга
    email: Optional[str] = None
    phone: Optional[str] = None


class CustomerDetails(BaseModel):
    id: Optional[int] = None
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""
