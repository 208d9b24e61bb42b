"""
Catalog products and their condition variants.

A product marked `is_single` carries one variant per card condition. The
sync job keeps `price` and `market_data` current for products with
`auto_price_sync` enabled.
"""

import uuid

from sqlalchemy import Column, String, Float, Boolean, ForeignKey, Text, text, TIMESTAMP
from sqlalchemy.orm import relationship
from sqlalchemy.dialects.postgresql import JSONB

from ..database import Base


class Product(Base):
    __tablename__ = "products"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    created_at = Column(
        TIMESTAMP(timezone=False),
        server_default=text("timezone('utc', now())"),
        nullable=False
    )
    updated_at = Column(
        TIMESTAMP(timezone=False),
        server_default=text("timezone('utc', now())"),
        onupdate=text("timezone('utc', now())"),
        nullable=False
    )

    title = Column(String, nullable=False)
    description = Column(Text)
    price = Column(Float, nullable=False)
    image_url = Column(String)
    set_name = Column("set", String, nullable=False, index=True)
    expansion = Column(String)
    created_by = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    is_single = Column(Boolean, nullable=False, default=False, server_default=text("false"))
    pokemon_card_id = Column(String, index=True)
    market_data = Column(JSONB)
    auto_price_sync = Column(Boolean, nullable=False, default=False, server_default=text("false"))

    variants = relationship("ProductVariant", back_populates="product", cascade="all, delete-orphan", passive_deletes=True)
    added_products = relationship("AddedProduct", back_populates="product", cascade="all, delete-orphan", passive_deletes=True)

    def __repr__(self):
        return f"<Product(id='{self.id}', title='{self.title}', price={self.price})>"


class ProductVariant(Base):
    __tablename__ = "product_variants"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    product_id = Column(String(36), ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    option1 = Column(String, nullable=False)
    price = Column(Float, nullable=False)
    sku = Column(String, nullable=False)

    created_at = Column(
        TIMESTAMP(timezone=False),
        server_default=text("timezone('utc', now())"),
        nullable=False
    )
    updated_at = Column(
        TIMESTAMP(timezone=False),
        server_default=text("timezone('utc', now())"),
        onupdate=text("timezone('utc', now())"),
        nullable=False
    )

    product = relationship("Product", back_populates="variants")
