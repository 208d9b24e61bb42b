"""
Linkage between a catalog product and the copy pushed to a merchant's store.
"""

import uuid

from sqlalchemy import Column, String, ForeignKey, UniqueConstraint, text, TIMESTAMP
from sqlalchemy.orm import relationship

from elite_cards.core.enums import SyncStatus
from ..database import Base


class AddedProduct(Base):
    __tablename__ = "added_products"
    __table_args__ = (
        UniqueConstraint("user_id", "product_id", name="uq_added_products_user_product"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(String(36), ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    shopify_product_id = Column(String)

    sync_status = Column(String(20), nullable=False, default=SyncStatus.ACTIVE.value, server_default=SyncStatus.ACTIVE.value)
    added_at = Column(
        TIMESTAMP(timezone=False),
        server_default=text("timezone('utc', now())"),
        nullable=False
    )
    last_synced_at = Column(TIMESTAMP(timezone=False))
    deleted_at = Column(TIMESTAMP(timezone=False))

    user = relationship("User", back_populates="added_products")
    product = relationship("Product", back_populates="added_products")

    def __repr__(self):
        return f"<AddedProduct(user_id='{self.user_id}', product_id='{self.product_id}', status='{self.sync_status}')>"
