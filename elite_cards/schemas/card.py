"""
Schemas for Pokemon TCG card data returned by the card client.
"""

from typing import Optional, List

from pydantic import BaseModel, ConfigDict, Field

from .base import RequestSchema


class CardPricing(BaseModel):
    market_price: float
    low_price: Optional[float] = None
    mid_price: Optional[float] = None
    high_price: Optional[float] = None
    last_updated: Optional[str] = None
    source: str = "fallback"


class PokemonCard(BaseModel):
    """Normalized card record"""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    set_name: str = Field(alias="set")
    set_id: Optional[str] = None
    number: Optional[str] = None
    rarity: str = "Unknown"
    image_url: str = ""
    pricing: CardPricing

    @property
    def market_price(self) -> float:
        return self.pricing.market_price


class CardSet(BaseModel):
    id: str
    name: str
    series: Optional[str] = None
    total: Optional[int] = None
    release_date: Optional[str] = None
    logo_url: Optional[str] = None
    symbol_url: Optional[str] = None


class CardSearchPage(BaseModel):
    cards: List[PokemonCard]
    page: int
    page_size: int
    total: int


class AddCardToCatalogRequest(RequestSchema):
    pokemon_card_id: str = Field(min_length=1)
    create_variants: bool = True
    auto_price_sync: bool = True
