# elite_cards/dependencies.py
from functools import lru_cache
from typing import AsyncGenerator

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from elite_cards.core.config import Settings, get_settings
from elite_cards.core.security import SESSION_COOKIE_NAME, verify_session
from elite_cards.database import async_session
from elite_cards.models.user import User
from elite_cards.schemas.session import SessionClaims
from elite_cards.services.auth_service import AuthService
from elite_cards.services.card_import_service import CardImportService
from elite_cards.services.linkage_service import LinkageService
from elite_cards.services.pokemon_tcg.client import PokemonTCGClient
from elite_cards.services.price_sync_service import PriceSyncService
from elite_cards.services.product_service import ProductService
from elite_cards.services.shopify.client import ShopifyClient
from elite_cards.services.store_sync_service import StoreSyncService
from elite_cards.services.user_service import UserService


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for getting async database session"""
    async with async_session() as session:
        try:
            yield session
        finally:
            await session.close()


# --- Clients (one per process) ---

@lru_cache()
def get_shopify_client() -> ShopifyClient:
    return ShopifyClient.from_settings(get_settings())


@lru_cache()
def get_card_client() -> PokemonTCGClient:
    return PokemonTCGClient.from_settings(get_settings())


# --- Session ---

def get_optional_session(request: Request) -> SessionClaims | None:
    return verify_session(request.cookies.get(SESSION_COOKIE_NAME))


def get_current_session(session: SessionClaims | None = Depends(get_optional_session)) -> SessionClaims:
    if session is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return session


def require_admin(session: SessionClaims = Depends(get_current_session)) -> SessionClaims:
    if not session.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return session


async def get_current_user(
    session: SessionClaims = Depends(get_current_session),
    db: AsyncSession = Depends(get_db)
) -> User:
    """The merchant behind the session, with their store credentials."""
    user = await UserService(db).get_user_by_id(session.user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    return user


# --- Services ---

def get_user_service(db: AsyncSession = Depends(get_db)) -> UserService:
    return UserService(db)


def get_product_service(db: AsyncSession = Depends(get_db)) -> ProductService:
    return ProductService(db)


def get_linkage_service(db: AsyncSession = Depends(get_db)) -> LinkageService:
    return LinkageService(db)


def get_store_sync_service(
    db: AsyncSession = Depends(get_db),
    shopify: ShopifyClient = Depends(get_shopify_client)
) -> StoreSyncService:
    return StoreSyncService(db, shopify)


def get_auth_service(
    db: AsyncSession = Depends(get_db),
    shopify: ShopifyClient = Depends(get_shopify_client),
    settings: Settings = Depends(get_settings)
) -> AuthService:
    return AuthService(db, shopify, settings)


def get_card_import_service(
    db: AsyncSession = Depends(get_db),
    cards: PokemonTCGClient = Depends(get_card_client)
) -> CardImportService:
    return CardImportService(db, cards)


def get_price_sync_service(
    db: AsyncSession = Depends(get_db),
    cards: PokemonTCGClient = Depends(get_card_client),
    shopify: ShopifyClient = Depends(get_shopify_client),
    settings: Settings = Depends(get_settings)
) -> PriceSyncService:
    return PriceSyncService(
        db,
        cards,
        shopify,
        threshold=settings.PRICE_SYNC_THRESHOLD,
        concurrency=settings.PRICE_SYNC_CONCURRENCY,
    )
