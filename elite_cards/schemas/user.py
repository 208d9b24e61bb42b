"""
Schemas for merchant accounts and admin user management.
"""
from datetime import datetime
from typing import Optional

from pydantic import field_validator

from elite_cards.core.enums import UserRole
from .base import BaseSchema, RequestSchema


class UserRead(BaseSchema):
    """Merchant as returned by the API. The access token is never exposed."""
    id: str
    shop_domain: str
    role: UserRole
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PromoteUserRequest(RequestSchema):
    shop_domain: str
    new_role: UserRole

    @field_validator('new_role', mode='before')
    @classmethod
    def validate_role(cls, v):
        if v not in [role.value for role in UserRole]:
            raise ValueError('Invalid role. Must be "admin" or "end_user"')
        return v


class PushToUserRequest(RequestSchema):
    product_id: str
    user_id: str
