"""
Persistence for AddedProduct linkages (catalog product <-> merchant store copy).

A merchant holds at most one linkage per product, enforced here and by the
uq_added_products_user_product constraint. Retired linkages
(sync_status=deleted) are reactivated when the product is pushed again.
"""

import logging
import uuid
from typing import List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from elite_cards.core.enums import SyncStatus
from elite_cards.core.exceptions import ProductAlreadyAddedError
from elite_cards.core.utils import utc_now
from elite_cards.models.added_product import AddedProduct
from elite_cards.models.user import User

logger = logging.getLogger(__name__)


class LinkageService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _get_any_linkage(self, user_id: str, product_id: str) -> Optional[AddedProduct]:
        result = await self.db.execute(
            select(AddedProduct).where(
                AddedProduct.user_id == user_id,
                AddedProduct.product_id == product_id,
            )
        )
        return result.scalar_one_or_none()

    async def get_linkage(self, user_id: str, product_id: str) -> Optional[AddedProduct]:
        """Return the live linkage for a merchant and product, if any."""
        linkage = await self._get_any_linkage(user_id, product_id)
        if linkage is None or linkage.sync_status not in SyncStatus.live():
            return None
        return linkage

    async def is_product_added(self, user_id: str, product_id: str) -> bool:
        return await self.get_linkage(user_id, product_id) is not None

    async def add_product_to_user(self, user_id: str, product_id: str, shopify_product_id: str) -> AddedProduct:
        """
        Record that a product now exists on a merchant's store.

        Raises:
            ProductAlreadyAddedError: If a live linkage already exists
        """
        linkage = await self._get_any_linkage(user_id, product_id)

        if linkage is not None:
            if linkage.sync_status in SyncStatus.live():
                raise ProductAlreadyAddedError("Product already added to your store")
            linkage.shopify_product_id = shopify_product_id
            linkage.sync_status = SyncStatus.ACTIVE.value
            linkage.added_at = utc_now()
            linkage.deleted_at = None
            logger.info(f"Reactivated linkage for product {product_id} on user {user_id}")
        else:
            linkage = AddedProduct(
                id=str(uuid.uuid4()),
                user_id=user_id,
                product_id=product_id,
                shopify_product_id=shopify_product_id,
                sync_status=SyncStatus.ACTIVE.value,
            )
            self.db.add(linkage)

        try:
            await self.db.commit()
        except IntegrityError:
            # Concurrent push for the same merchant and product
            await self.db.rollback()
            raise ProductAlreadyAddedError("Product already added to your store")

        return linkage

    async def remove_linkage(self, linkage: AddedProduct) -> None:
        await self.db.delete(linkage)
        await self.db.commit()
        logger.info(f"Removed linkage for product {linkage.product_id} on user {linkage.user_id}")

    async def get_user_linkages(self, user_id: str) -> List[AddedProduct]:
        result = await self.db.execute(
            select(AddedProduct).where(
                AddedProduct.user_id == user_id,
                AddedProduct.sync_status.in_(SyncStatus.live()),
            )
        )
        return list(result.scalars().all())

    async def get_added_product_ids(self, user_id: str) -> List[str]:
        return [linkage.product_id for linkage in await self.get_user_linkages(user_id)]

    async def get_users_with_product(self, product_id: str) -> List[Tuple[AddedProduct, User]]:
        """Live linkages of a product together with the owning merchant."""
        result = await self.db.execute(
            select(AddedProduct, User)
            .join(User, User.id == AddedProduct.user_id)
            .where(
                AddedProduct.product_id == product_id,
                AddedProduct.sync_status.in_(SyncStatus.live()),
            )
        )
        return [(linkage, user) for linkage, user in result.all()]

    async def mark_synced(self, linkage: AddedProduct) -> None:
        linkage.sync_status = SyncStatus.ACTIVE.value
        linkage.last_synced_at = utc_now()

    async def mark_error(self, linkage: AddedProduct) -> None:
        linkage.sync_status = SyncStatus.ERROR.value

    async def mark_deleted(self, linkage: AddedProduct) -> None:
        linkage.sync_status = SyncStatus.DELETED.value
        linkage.deleted_at = utc_now()

    async def commit(self) -> None:
        await self.db.commit()
