"""
Scheduled price synchronization.

For every product with auto_price_sync enabled, fetch the linked card's
current market price. When it has drifted more than the deadband
(PRICE_SYNC_THRESHOLD, 5% by default) the catalog price is updated and the
new price is pushed to every merchant store holding the product.

Products are processed one at a time and each one is isolated: a failing
card lookup or a failing store never stops the run. Errors are collected
and returned with the summary.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from elite_cards.models.added_product import AddedProduct
from elite_cards.models.product import Product
from elite_cards.models.user import User
from elite_cards.schemas.card import PokemonCard
from elite_cards.services.linkage_service import LinkageService
from elite_cards.services.pokemon_tcg.client import PokemonTCGClient
from elite_cards.services.product_service import ProductService, variant_prices_for
from elite_cards.services.shopify.client import ShopifyClient, ShopifyResult

logger = logging.getLogger(__name__)


@dataclass
class PriceSyncResult:
    total: int = 0
    updated: int = 0
    unchanged: int = 0
    skipped: int = 0
    errors: List[str] = field(default_factory=list)

    @property
    def message(self) -> str:
        return f"Scheduled price sync completed. Updated {self.updated} products."


def price_drift(old_price: float, new_price: float) -> float:
    """Relative change from old_price to new_price."""
    if not old_price or old_price <= 0:
        return float("inf") if new_price > 0 else 0.0
    return abs(new_price - old_price) / old_price


class PriceSyncService:
    def __init__(
        self,
        db: AsyncSession,
        card_client: PokemonTCGClient,
        shopify_client: ShopifyClient,
        threshold: float = 0.05,
        concurrency: int = 1,
        products: Optional[ProductService] = None,
        linkages: Optional[LinkageService] = None
    ):
        self.db = db
        self.cards = card_client
        self.shopify = shopify_client
        self.threshold = threshold
        self.concurrency = max(1, concurrency)
        self.products = products or ProductService(db)
        self.linkages = linkages or LinkageService(db)

    def needs_update(self, old_price: float, new_price: float) -> bool:
        return price_drift(old_price, new_price) > self.threshold

    async def run(self) -> PriceSyncResult:
        """
        Run one sync pass over all auto-sync products.

        Returns:
            PriceSyncResult with counts and collected error strings
        """
        result = PriceSyncResult()
        products = await self.products.get_auto_sync_products()
        result.total = len(products)
        logger.info(f"Price sync starting for {len(products)} products")

        # A rollback expires every loaded row, so read these first
        entries = [(product, product.id, product.title) for product in products]
        stale = False

        for product, product_id, title in entries:
            try:
                if stale:
                    await self.db.refresh(product)
                if not product.pokemon_card_id:
                    logger.warning(f"Product {title} ({product_id}) has auto price sync enabled but no Pokemon card id, skipping")
                    result.skipped += 1
                    continue

                card = await self.cards.get_card(product.pokemon_card_id)
                new_price = card.market_price

                if not self.needs_update(product.price, new_price):
                    logger.debug(f"Price of {title} unchanged ({product.price} -> {new_price})")
                    result.unchanged += 1
                    continue

                old_price = product.price
                await self.products.update_product_price(product, new_price, self._market_data(card))
                result.updated += 1
                logger.info(f"Updated price of {title} from {old_price} to {new_price}")

                result.errors.extend(await self._propagate_price(product, new_price))
            except Exception as e:
                logger.error(f"Error syncing price for product {title} ({product_id}): {e}")
                result.errors.append(f"Product {title}: {e}")
                await self.db.rollback()
                stale = True

        logger.info(f"Price sync finished: {result.updated} updated, {result.unchanged} unchanged, "
                    f"{result.skipped} skipped, {len(result.errors)} errors")
        return result

    @staticmethod
    def _market_data(card: PokemonCard) -> Dict:
        pricing = card.pricing
        return {
            "low_price": pricing.low_price,
            "mid_price": pricing.mid_price,
            "high_price": pricing.high_price,
            "last_updated": pricing.last_updated,
            "source": pricing.source,
        }

    async def _propagate_price(self, product: Product, new_price: float) -> List[str]:
        """
        Push a new price to every merchant store holding the product.

        Remote calls run concurrently up to `concurrency`; linkage statuses are
        written afterwards in a single commit.

        Returns:
            List of "<shop_domain>: <error>" strings for failed stores
        """
        targets = await self.linkages.get_users_with_product(product.id)
        if not targets:
            return []

        variant_prices = variant_prices_for(new_price) if product.is_single else None
        semaphore = asyncio.Semaphore(self.concurrency)

        async def _update(linkage: AddedProduct, user: User) -> ShopifyResult:
            async with semaphore:
                return await self.shopify.update_price(
                    user.access_token, user.shop_domain, linkage.shopify_product_id, new_price, variant_prices
                )

        outcomes = await asyncio.gather(
            *(_update(linkage, user) for linkage, user in targets),
            return_exceptions=True
        )

        errors = []
        for (linkage, user), outcome in zip(targets, outcomes):
            error = self._record_outcome(linkage, user, outcome)
            if error:
                errors.append(error)
                await self.linkages.mark_error(linkage)
            elif isinstance(outcome, ShopifyResult) and outcome.not_found:
                await self.linkages.mark_deleted(linkage)
            else:
                await self.linkages.mark_synced(linkage)

        await self.linkages.commit()
        return errors

    @staticmethod
    def _record_outcome(linkage: AddedProduct, user: User, outcome) -> Optional[str]:
        if isinstance(outcome, BaseException):
            logger.error(f"Error updating price on {user.shop_domain} for linkage {linkage.id}: {outcome}")
            return f"{user.shop_domain}: {outcome}"
        if outcome.not_found:
            logger.warning(f"Shopify product {linkage.shopify_product_id} no longer exists on {user.shop_domain}, retiring linkage")
            return None
        if not outcome.success:
            logger.error(f"Failed to update price on {user.shop_domain}: {outcome.error}")
            return f"{user.shop_domain}: {outcome.error}"
        return None
