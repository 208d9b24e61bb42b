"""
Shopify OAuth installation handshake.

begin_install builds the authorize URL for a store. complete_install
validates the callback, exchanges the code, upserts the merchant and mints a
session token. Routes turn the outcome into redirects and cookies.
"""

import logging
from dataclasses import dataclass
from typing import Mapping, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from elite_cards.core.config import Settings
from elite_cards.core.enums import UserRole
from elite_cards.core.exceptions import AuthenticationError, ValidationError
from elite_cards.core.security import create_session, generate_oauth_state
from elite_cards.core.utils import is_valid_shop_domain, normalize_shop_domain
from elite_cards.models.user import User
from elite_cards.schemas.session import SessionClaims
from elite_cards.services.shopify.client import ShopifyClient
from elite_cards.services.user_service import UserService

logger = logging.getLogger(__name__)


@dataclass
class InstallRedirect:
    url: str
    state: str
    shop: str


@dataclass
class InstallResult:
    user: User
    session_token: str
    redirect_url: str


class AuthService:
    def __init__(
        self,
        db: AsyncSession,
        shopify_client: ShopifyClient,
        settings: Settings,
        users: Optional[UserService] = None
    ):
        self.db = db
        self.shopify = shopify_client
        self.settings = settings
        self.users = users or UserService(db)

    @property
    def error_redirect_url(self) -> str:
        return f"{self.settings.APP_URL.rstrip('/')}/auth?error=authentication_failed"

    def redirect_uri(self, path: str) -> str:
        return f"{self.settings.APP_URL.rstrip('/')}{path}"

    def begin_install(self, shop: Optional[str], callback_path: str) -> InstallRedirect:
        """
        Build the authorize redirect for a store.

        Args:
            shop: Shop name or domain from the install request
            callback_path: Route Shopify should return to

        Raises:
            ValidationError: If the shop is missing or not a myshopify.com domain
        """
        if not shop:
            raise ValidationError("Missing shop parameter")

        shop_domain = normalize_shop_domain(shop)
        if not is_valid_shop_domain(shop_domain):
            raise ValidationError(f"Invalid shop domain: {shop}")

        state = generate_oauth_state()
        url = self.shopify.get_auth_url(shop_domain, self.redirect_uri(callback_path), state=state)
        logger.info(f"Starting OAuth install for {shop_domain}")
        return InstallRedirect(url=url, state=state, shop=shop_domain)

    def _role_for_new_install(self, shop_domain: str) -> UserRole:
        if shop_domain in self.settings.admin_shop_domains:
            return UserRole.ADMIN
        return UserRole.END_USER

    async def complete_install(self, params: Mapping[str, str], expected_state: Optional[str] = None) -> InstallResult:
        """
        Handle the OAuth callback.

        Args:
            params: Callback query parameters (code, shop, hmac, state, timestamp...)
            expected_state: Nonce issued by begin_install, if the browser kept it

        Returns:
            InstallResult with the merchant, session token and landing URL

        Raises:
            AuthenticationError: On any validation or exchange failure
        """
        query = dict(params)
        shop = query.get("shop")
        if shop:
            shop = normalize_shop_domain(shop)
            if not is_valid_shop_domain(shop):
                raise AuthenticationError(f"Invalid shop domain: {shop}")

        if expected_state and query.get("state") != expected_state:
            logger.warning(f"OAuth state mismatch for {shop}")
            raise AuthenticationError("OAuth state mismatch")

        callback = await self.shopify.validate_callback(
            code=query.get("code"),
            shop=shop,
            hmac=query.get("hmac"),
            state=query.get("state"),
            params=query,
        )
        if not callback.success:
            logger.error(f"OAuth callback failed for {shop} ({callback.reason}): {callback.error}")
            raise AuthenticationError(callback.error or "Authentication failed")

        user = await self.users.create_or_update_user(
            callback.shop, callback.access_token, role=self._role_for_new_install(callback.shop)
        )
        token = create_session(SessionClaims(user_id=user.id, shop_domain=user.shop_domain, role=user.role))

        landing = "/admin" if user.role == UserRole.ADMIN.value else "/catalog"
        logger.info(f"OAuth install completed for {user.shop_domain} (role {user.role})")
        return InstallResult(user=user, session_token=token, redirect_url=self.redirect_uri(landing))
