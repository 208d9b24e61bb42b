"""
Merchant accounts created by the Shopify OAuth install.
"""

import uuid

from sqlalchemy import Column, String, text, TIMESTAMP
from sqlalchemy.orm import relationship

from elite_cards.core.enums import UserRole
from ..database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    shop_domain = Column(String, unique=True, nullable=False, index=True)
    access_token = Column(String, nullable=False)
    role = Column(String(20), nullable=False, default=UserRole.END_USER.value, server_default=UserRole.END_USER.value)

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

    added_products = relationship("AddedProduct", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    def __repr__(self):
        return f"<User(id='{self.id}', shop_domain='{self.shop_domain}', role='{self.role}')>"
