"""
Imports Pokemon TCG cards into the catalog as products.
"""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from elite_cards.core.exceptions import ValidationError
from elite_cards.models.product import Product
from elite_cards.schemas.card import PokemonCard
from elite_cards.schemas.product import MarketData, ProductCreate
from elite_cards.services.pokemon_tcg.client import PokemonTCGClient
from elite_cards.services.product_service import ProductService

logger = logging.getLogger(__name__)


def card_to_product(card: PokemonCard, is_single: bool = True, auto_price_sync: bool = True) -> ProductCreate:
    """Map a card onto catalog product fields."""
    pricing = card.pricing
    return ProductCreate(
        title=f"{card.name} ({card.set_name})",
        description=f"Pokemon TCG {card.name} from {card.set_name} set. {card.rarity} rarity card.",
        price=card.market_price,
        image_url=card.image_url,
        set_name=card.set_name,
        is_single=is_single,
        auto_price_sync=auto_price_sync,
        pokemon_card_id=card.id,
        market_data=MarketData(
            low_price=pricing.low_price,
            mid_price=pricing.mid_price,
            high_price=pricing.high_price,
            last_updated=pricing.last_updated,
        ),
    )


class CardImportService:
    def __init__(self, db: AsyncSession, card_client: PokemonTCGClient, products: Optional[ProductService] = None):
        self.db = db
        self.cards = card_client
        self.products = products or ProductService(db)

    async def import_card(
        self,
        pokemon_card_id: str,
        created_by: Optional[str] = None,
        create_variants: bool = True,
        auto_price_sync: bool = True
    ) -> Product:
        """
        Fetch a card and add it to the catalog.

        Args:
            pokemon_card_id: Pokemon TCG card id, e.g. "base1-4"
            created_by: Admin importing the card
            create_variants: Create condition variants (is_single)
            auto_price_sync: Keep the price in sync with the market

        Returns:
            Product: The new catalog product

        Raises:
            ValidationError: If the card is already in the catalog
            CardAPIError: If the card cannot be fetched
        """
        existing = await self.products.get_product_by_card_id(pokemon_card_id)
        if existing is not None:
            raise ValidationError(f"Card {pokemon_card_id} is already in the catalog as '{existing.title}'")

        card = await self.cards.get_card(pokemon_card_id)
        if not card.image_url:
            raise ValidationError(f"Card {pokemon_card_id} has no image")

        product = await self.products.create_product(
            card_to_product(card, is_single=create_variants, auto_price_sync=auto_price_sync),
            created_by=created_by,
        )
        logger.info(f"Imported card {pokemon_card_id} as product {product.id} at {product.price}")
        return product
