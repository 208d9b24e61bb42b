"""
Purpose: Publishes catalog products to merchant stores and removes them again.

Role: The multi-tenant workflow between the catalog, the AddedProduct
linkages and each merchant's Shopify store.

- push_product_to_user: create the product remotely, then record the linkage
- remove_product_from_user: delete remotely, then drop the linkage. A remote
  404 counts as removed; any other failure keeps the linkage so the merchant
  can retry.
- add_all_from_set / remove_all_from_set: the same operations across a set,
  with each product isolated so one failure does not stop the batch.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from elite_cards.core.exceptions import (
    LinkageNotFoundError,
    ProductAlreadyAddedError,
    ProductNotFoundError,
    ShopifyAPIError,
    ValidationError,
)
from elite_cards.models.added_product import AddedProduct
from elite_cards.models.product import Product
from elite_cards.models.user import User
from elite_cards.schemas.product import BatchFailure, BatchResult
from elite_cards.services.linkage_service import LinkageService
from elite_cards.services.product_service import ProductService
from elite_cards.services.shopify.client import ShopifyClient, ShopifyProductInput

logger = logging.getLogger(__name__)


@dataclass
class PushResult:
    product: Product
    linkage: AddedProduct
    shopify_product_id: str


class StoreSyncService:
    def __init__(
        self,
        db: AsyncSession,
        shopify_client: ShopifyClient,
        products: Optional[ProductService] = None,
        linkages: Optional[LinkageService] = None
    ):
        self.db = db
        self.shopify = shopify_client
        self.products = products or ProductService(db)
        self.linkages = linkages or LinkageService(db)

    async def _build_shopify_input(self, product: Product) -> ShopifyProductInput:
        variants = None
        if product.is_single:
            variants = [
                {"option1": variant.option1, "price": variant.price, "sku": variant.sku}
                for variant in await self.products.get_variants(product.id)
            ]
        return ShopifyProductInput(
            title=product.title,
            description=product.description or "",
            price=product.price,
            image_url=product.image_url,
            set_name=product.set_name,
            expansion=product.expansion,
            is_single=bool(product.is_single),
            variants=variants or None,
        )

    async def _push(self, product: Product, user: User) -> PushResult:
        payload = await self._build_shopify_input(product)
        result = await self.shopify.create_product(user.access_token, user.shop_domain, payload)
        if not result.success:
            logger.error(f"Failed to push product {product.id} to {user.shop_domain}: {result.error}")
            raise ShopifyAPIError(result.error or "Failed to create product in Shopify", http_status=result.status_code)

        linkage = await self.linkages.add_product_to_user(user.id, product.id, result.product_id)
        logger.info(f"Pushed product {product.id} to {user.shop_domain} as {result.product_id}")
        return PushResult(product=product, linkage=linkage, shopify_product_id=result.product_id)

    async def push_product_to_user(self, product: Product, user: User) -> PushResult:
        """
        Create a catalog product on a merchant's store and record the linkage.

        Args:
            product: Catalog product
            user: Target merchant

        Returns:
            PushResult

        Raises:
            ProductAlreadyAddedError: If the merchant already has this product
            ShopifyAPIError: If Shopify rejects the product. No linkage is recorded.
        """
        if await self.linkages.is_product_added(user.id, product.id):
            raise ProductAlreadyAddedError("Product already added to your store")
        return await self._push(product, user)

    async def push_product_by_id(self, product_id: str, user: User) -> PushResult:
        product = await self.products.get_product_or_404(product_id)
        return await self.push_product_to_user(product, user)

    async def remove_product_from_user(self, user: User, product_id: str) -> None:
        """
        Remove a product from a merchant's store and drop the linkage.

        Raises:
            LinkageNotFoundError: If the product is not on the merchant's store
            ShopifyAPIError: If the remote delete fails for a reason other
                than the product already being gone. The linkage is kept.
        """
        linkage = await self.linkages.get_linkage(user.id, product_id)
        if linkage is None:
            raise LinkageNotFoundError("Product not found in your store")

        if linkage.shopify_product_id:
            result = await self.shopify.delete_product(user.access_token, user.shop_domain, linkage.shopify_product_id)
            if result.not_found:
                logger.info(
                    f"Shopify product {linkage.shopify_product_id} already gone from {user.shop_domain}, "
                    f"dropping linkage"
                )
            elif not result.success:
                logger.error(f"Failed to remove product {product_id} from {user.shop_domain}: {result.error}")
                raise ShopifyAPIError(result.error or "Failed to delete product from Shopify", http_status=result.status_code)

        await self.linkages.remove_linkage(linkage)

    async def add_all_from_set(self, user: User, set_name: str) -> BatchResult:
        """
        Push every product of a set to a merchant's store.

        Raises:
            ValidationError: If no set is given
            ProductNotFoundError: If the set has no products
        """
        if not set_name:
            raise ValidationError("Set name is required")

        products = await self.products.get_products_by_set(set_name)
        if not products:
            raise ProductNotFoundError("No products found for this set")

        # A rollback expires every loaded row, so read these first
        shop_domain = user.shop_domain
        entries = [(product, product.id, product.title) for product in products]

        result = BatchResult()
        stale = False
        user_stale = False
        for product, product_id, title in entries:
            try:
                if user_stale:
                    await self.db.refresh(user)
                    user_stale = False
                if stale:
                    await self.db.refresh(product)
                if await self.linkages.is_product_added(user.id, product_id):
                    result.already_added.append(title)
                    continue
                await self._push(product, user)
                result.successful.append(title)
            except ProductAlreadyAddedError:
                result.already_added.append(title)
                await self.db.rollback()
                stale = True
                user_stale = True
            except Exception as e:
                logger.error(f"Error adding product {product_id} ({title}) to {shop_domain}: {e}")
                result.failed.append(BatchFailure(product_id=product_id, error=str(e)))
                await self.db.rollback()
                stale = True
                user_stale = True

        message = f"Successfully added {len(result.successful)} products to your store."
        if result.already_added:
            message += f" {len(result.already_added)} products were already added."
        if result.failed:
            message += f" {len(result.failed)} products failed to add."
        result.message = message

        logger.info(f"Bulk add of set '{set_name}' for {shop_domain}: {message}")
        return result

    async def remove_all_from_set(self, user: User, set_name: str) -> BatchResult:
        """
        Remove every product of a set from a merchant's store.

        Raises:
            ValidationError: If no set is given or none of its products are on the store
        """
        if not set_name:
            raise ValidationError("Set name is required")

        products = await self.products.get_products_by_set(set_name)
        added_ids = set(await self.linkages.get_added_product_ids(user.id))
        to_remove = [product for product in products if product.id in added_ids]
        if not to_remove:
            raise ValidationError("No products from this set are currently added to your store")

        result = BatchResult()
        for product in to_remove:
            product_id, title = product.id, product.title
            try:
                await self.remove_product_from_user(user, product_id)
                result.successful.append(title)
            except LinkageNotFoundError:
                result.not_found.append(title)
            except Exception as e:
                logger.error(f"Error removing product {product_id} ({title}) from {user.shop_domain}: {e}")
                result.failed.append(BatchFailure(product_id=product_id, error=str(e)))

        message = f"Successfully removed {len(result.successful)} products from your store."
        if result.not_found:
            message += f" {len(result.not_found)} products were not found."
        if result.failed:
            message += f" {len(result.failed)} products failed to remove."
        result.message = message

        logger.info(f"Bulk remove of set '{set_name}' for {user.shop_domain}: {message}")
        return result
