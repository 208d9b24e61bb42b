# elite_cards/core/config.py

import os
from functools import lru_cache
from typing import List
from pydantic import ConfigDict
from pydantic_settings import BaseSettings


def _parse_domain_list(value):
    if value in (None, "", []):
        return []
    if isinstance(value, str):
        return [domain.strip().lower() for domain in value.split(",") if domain.strip()]
    if isinstance(value, (list, tuple, set)):
        return [str(domain).strip().lower() for domain in value if str(domain).strip()]
    return []


class Settings(BaseSettings):
    """
    Application settings.
    Loads values from environment variables (.env file)
    """
    # Database settings
    DATABASE_URL: str = "postgresql+asyncpg://localhost/elite_cards"

    # Sessions
    JWT_SECRET: str = ""
    JWT_ALGORITHM: str = "HS256"
    SESSION_MAX_AGE: int = 60 * 60 * 24 * 7  # 7 days

    # Shopify app credentials
    SHOPIFY_API_KEY: str = ""
    SHOPIFY_API_SECRET: str = ""
    SHOPIFY_SCOPES: str = "read_products,write_products"
    SHOPIFY_API_VERSION: str = "2024-10"
    SHOPIFY_VERIFY_HMAC: bool = True
    SHOPIFY_TIMEOUT: float = 30.0

    # Public base URL used for OAuth redirects
    APP_URL: str = "http://localhost:8000"

    # Bootstrap administrators (comma separated shop domains)
    ADMIN_SHOP_DOMAINS: str = ""

    # Pokemon TCG API
    POKEMON_TCG_API_KEY: str = ""
    POKEMON_TCG_TIMEOUT: float = 60.0

    # Price sync
    CRON_SECRET: str = ""
    PRICE_SYNC_THRESHOLD: float = 0.05
    PRICE_SYNC_CONCURRENCY: int = 1
    ENABLE_SCHEDULER: bool = False
    PRICE_SYNC_CRON: str = "0 */6 * * *"

    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = False

    model_config = ConfigDict(
        env_file=os.environ.get('ENV_FILE', '.env') if os.path.exists('.env') else None,
        case_sensitive=True,
        extra="ignore"
    )

    @property
    def shopify_scope_list(self) -> List[str]:
        return [scope.strip() for scope in self.SHOPIFY_SCOPES.split(",") if scope.strip()]

    @property
    def admin_shop_domains(self) -> List[str]:
        return _parse_domain_list(self.ADMIN_SHOP_DOMAINS)

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"


@lru_cache()
def get_settings():
    """Cached settings to avoid loading .env file for every request"""
    return Settings()
