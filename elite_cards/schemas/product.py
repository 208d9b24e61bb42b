"""
Schemas for catalog products, condition variants and merchant store actions.
"""

from datetime import datetime
from typing import Optional, List, Dict, Any

from pydantic import BaseModel, Field, field_validator, ConfigDict

from .base import BaseSchema, RequestSchema


def _parse_price(v):
    if v is None or v == '':
        raise ValueError('Price is required')
    try:
        price = float(v)
    except (ValueError, TypeError):
        raise ValueError(f'Price must be a valid number, got: {v}')
    if price <= 0:
        raise ValueError('Price must be greater than 0')
    return price


class MarketData(BaseModel):
    """Latest market snapshot stored on a product"""
    model_config = ConfigDict(populate_by_name=True)

    low_price: Optional[float] = None
    mid_price: Optional[float] = None
    high_price: Optional[float] = None
    last_updated: Optional[str] = None


class ProductCreate(RequestSchema):
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    price: float
    image_url: str = Field(min_length=1)
    set_name: str = Field(alias="set", min_length=1)
    expansion: Optional[str] = None
    is_single: bool = False
    auto_price_sync: bool = False
    pokemon_card_id: Optional[str] = None
    market_data: Optional[MarketData] = None

    @field_validator('price', mode='before')
    @classmethod
    def validate_price(cls, v):
        return _parse_price(v)


class ProductUpdate(RequestSchema):
    """Partial update. Only the fields present in the request are applied."""
    product_id: str
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    price: Optional[float] = None
    image_url: Optional[str] = None
    set_name: Optional[str] = Field(default=None, alias="set", min_length=1)
    expansion: Optional[str] = None
    is_single: Optional[bool] = None
    auto_price_sync: Optional[bool] = None
    pokemon_card_id: Optional[str] = None

    @field_validator('price', mode='before')
    @classmethod
    def validate_price(cls, v):
        if v is None:
            return None
        return _parse_price(v)

    def changes(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True, exclude={"product_id"})


class ProductVariantRead(BaseSchema):
    id: str
    product_id: str
    option1: str
    price: float
    sku: str


class ProductRead(BaseSchema):
    id: str
    title: str
    description: Optional[str] = None
    price: float
    image_url: Optional[str] = None
    set_name: str = Field(alias="set")
    expansion: Optional[str] = None
    created_by: Optional[str] = None
    is_single: bool = False
    pokemon_card_id: Optional[str] = None
    market_data: Optional[Dict[str, Any]] = None
    auto_price_sync: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_response(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class ProductIdRequest(RequestSchema):
    product_id: str


class SetRequest(RequestSchema):
    set_name: str = Field(alias="set", min_length=1)


class BatchFailure(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product_id: str = Field(alias="productId")
    error: str


class BatchResult(BaseModel):
    """Outcome of a bulk add or remove across a set"""
    model_config = ConfigDict(populate_by_name=True)

    successful: List[str] = []
    failed: List[BatchFailure] = []
    already_added: List[str] = Field(default_factory=list, alias="alreadyAdded")
    not_found: List[str] = Field(default_factory=list, alias="notFound")
    message: str = ""
