"""
Purpose: The central service for managing catalog products.

Provides CRUD for products and their condition variants:
- Create products (with Near Mint / Lightly Played / Moderately Played
  variants for singles)
- Partial updates that keep variants consistent with price and is_single
- Search with pagination and listing grouped by set
- Price updates from the sync job

Returns ORM instances; routes convert them with ProductRead.
"""

import logging
import uuid
from typing import Optional, Dict, Any, List

from sqlalchemy import select, delete, or_
from sqlalchemy.ext.asyncio import AsyncSession

from elite_cards.core.enums import CardCondition
from elite_cards.core.exceptions import ProductNotFoundError, ValidationError
from elite_cards.core.utils import paginate_query
from elite_cards.models.product import Product, ProductVariant
from elite_cards.schemas.product import ProductCreate, ProductUpdate

logger = logging.getLogger(__name__)

# Columns that cannot be cleared by a partial update
NON_NULLABLE_FIELDS = {"title", "price", "set_name", "is_single", "auto_price_sync"}


def variant_prices_for(price: float) -> Dict[str, float]:
    """Price per condition label for a single priced at `price`."""
    return {condition.value: price * condition.price_fraction for condition in CardCondition}


class ProductService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_product(self, product_id: str) -> Optional[Product]:
        result = await self.db.execute(select(Product).where(Product.id == product_id))
        return result.scalar_one_or_none()

    async def get_product_or_404(self, product_id: str) -> Product:
        product = await self.get_product(product_id)
        if product is None:
            raise ProductNotFoundError(f"Product not found: {product_id}")
        return product

    async def get_variants(self, product_id: str) -> List[ProductVariant]:
        result = await self.db.execute(
            select(ProductVariant).where(ProductVariant.product_id == product_id).order_by(ProductVariant.price.desc())
        )
        return list(result.scalars().all())

    def _build_variants(self, product: Product) -> List[ProductVariant]:
        variants = []
        for condition in CardCondition:
            variant = ProductVariant(
                product_id=product.id,
                option1=condition.value,
                price=product.price * condition.price_fraction,
                sku=f"{product.id[:8]}-{condition.code}",
            )
            self.db.add(variant)
            variants.append(variant)
        return variants

    async def create_product(self, product_data: ProductCreate, created_by: Optional[str] = None) -> Product:
        """
        Create a catalog product.

        Args:
            product_data: Validated product data
            created_by: Id of the admin creating the product

        Returns:
            Product: The stored product
        """
        data = product_data.model_dump(exclude={"market_data"})
        market_data = product_data.market_data.model_dump() if product_data.market_data else None

        product = Product(id=str(uuid.uuid4()), **data, market_data=market_data, created_by=created_by)
        self.db.add(product)
        try:
            if product.is_single:
                self._build_variants(product)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        await self.db.refresh(product)
        logger.info(f"Created product {product.id} ({product.title}), single={product.is_single}")
        return product

    async def update_product(self, update: ProductUpdate) -> Product:
        """
        Apply a partial update.

        Turning is_single on creates condition variants, turning it off deletes
        them, and a price change on a single reprices its variants.

        Raises:
            ValidationError: If the update carries no fields
            ProductNotFoundError: If the product does not exist
        """
        changes = update.changes()
        if not changes:
            raise ValidationError("No fields to update")

        for field in NON_NULLABLE_FIELDS:
            if field in changes and changes[field] is None:
                raise ValidationError(f"{field} cannot be empty")

        product = await self.get_product_or_404(update.product_id)
        was_single = bool(product.is_single)

        for field, value in changes.items():
            setattr(product, field, value)

        if product.is_single and not was_single:
            self._build_variants(product)
        elif was_single and not product.is_single:
            await self.db.execute(delete(ProductVariant).where(ProductVariant.product_id == product.id))
        elif product.is_single and "price" in changes:
            await self._reprice_variants(product.id, product.price)

        await self.db.commit()
        await self.db.refresh(product)
        logger.info(f"Updated product {product.id}: {sorted(changes)}")
        return product

    async def delete_product(self, product_id: str) -> None:
        """Delete a product. Variants and store linkages cascade."""
        product = await self.get_product_or_404(product_id)
        await self.db.delete(product)
        await self.db.commit()
        logger.info(f"Deleted product {product_id}")

    async def _reprice_variants(self, product_id: str, price: float) -> List[ProductVariant]:
        prices = variant_prices_for(price)
        variants = await self.get_variants(product_id)
        for variant in variants:
            if variant.option1 in prices:
                variant.price = prices[variant.option1]
        return variants

    async def update_product_price(self, product: Product, new_price: float, market_data: Optional[Dict[str, Any]] = None) -> Product:
        """Persist a synced price and market snapshot, repricing variants of singles."""
        product.price = new_price
        if market_data is not None:
            product.market_data = market_data
        if product.is_single:
            await self._reprice_variants(product.id, new_price)
        await self.db.commit()
        return product

    async def get_auto_sync_products(self) -> List[Product]:
        result = await self.db.execute(
            select(Product).where(Product.auto_price_sync.is_(True)).order_by(Product.created_at)
        )
        return list(result.scalars().all())

    async def get_products_by_set(self, set_name: str) -> List[Product]:
        result = await self.db.execute(
            select(Product).where(Product.set_name == set_name).order_by(Product.title)
        )
        return list(result.scalars().all())

    async def get_product_by_card_id(self, pokemon_card_id: str) -> Optional[Product]:
        result = await self.db.execute(select(Product).where(Product.pokemon_card_id == pokemon_card_id))
        return result.scalars().first()

    async def list_products_by_set(self, set_name: Optional[str] = None) -> Dict[str, List[Product]]:
        query = select(Product).order_by(Product.set_name, Product.title)
        if set_name:
            query = query.where(Product.set_name == set_name)
        result = await self.db.execute(query)

        grouped: Dict[str, List[Product]] = {}
        for product in result.scalars().all():
            grouped.setdefault(product.set_name, []).append(product)
        return grouped

    async def search_products(self, query: str = "", page: int = 1, page_size: int = 25) -> Dict[str, Any]:
        """
        Case-insensitive search over title, description, set and expansion.

        Returns:
            Dict with items and pagination (see core.utils.paginate_query)
        """
        stmt = select(Product).order_by(Product.created_at.desc())
        if query:
            pattern = f"%{query}%"
            stmt = stmt.where(
                or_(
                    Product.title.ilike(pattern),
                    Product.description.ilike(pattern),
                    Product.set_name.ilike(pattern),
                    Product.expansion.ilike(pattern),
                )
            )
        return await paginate_query(stmt, self.db, page=page, page_size=page_size)
