"""
Merchant account persistence.

Users are created by the OAuth install and refreshed on every reinstall.
An admin role, once granted, survives reinstalls.
"""

import logging
import uuid
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from elite_cards.core.enums import UserRole
from elite_cards.core.exceptions import UserNotFoundError
from elite_cards.models.user import User

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_user_by_id(self, user_id: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def get_user_by_shop(self, shop_domain: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.shop_domain == shop_domain))
        return result.scalar_one_or_none()

    async def list_users(self) -> List[User]:
        result = await self.db.execute(select(User).order_by(User.created_at.desc()))
        return list(result.scalars().all())

    async def create_or_update_user(
        self,
        shop_domain: str,
        access_token: str,
        role: UserRole = UserRole.END_USER
    ) -> User:
        """
        Insert a merchant or refresh the token of an existing one.

        Args:
            shop_domain: Normalized shop domain
            access_token: Fresh offline access token
            role: Role for a new merchant. An existing admin is never demoted.

        Returns:
            User: The stored merchant
        """
        user = await self.get_user_by_shop(shop_domain)

        if user is None:
            user = User(id=str(uuid.uuid4()), shop_domain=shop_domain, access_token=access_token, role=UserRole(role).value)
            self.db.add(user)
            logger.info(f"Creating user for {shop_domain} with role {user.role}")
        else:
            user.access_token = access_token
            if user.role != UserRole.ADMIN.value:
                user.role = UserRole(role).value
            logger.info(f"Refreshed access token for {shop_domain} (role {user.role})")

        await self.db.commit()
        await self.db.refresh(user)
        return user

    async def update_user_role(self, shop_domain: str, new_role: UserRole) -> User:
        """
        Promote or demote a merchant.

        Raises:
            UserNotFoundError: If no merchant has this shop domain
        """
        user = await self.get_user_by_shop(shop_domain)
        if user is None:
            raise UserNotFoundError(f"User not found: {shop_domain}")

        user.role = UserRole(new_role).value
        await self.db.commit()
        await self.db.refresh(user)
        logger.info(f"Set role of {shop_domain} to {user.role}")
        return user
