"""
Utility functions for the application.
"""
import re

from datetime import datetime, timezone
from typing import Dict, Any
from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

SHOP_DOMAIN_PATTERN = re.compile(r"^[a-zA-Z0-9][a-zA-Z0-9\-]*\.myshopify\.com$")


def normalize_shop_domain(shop: str) -> str:
    """Expand a bare store name to `<name>.myshopify.com`."""
    shop = (shop or "").strip().lower()
    shop = re.sub(r"^https?://", "", shop).rstrip("/")
    return shop if "." in shop else f"{shop}.myshopify.com"


def is_valid_shop_domain(shop: str) -> bool:
    return bool(shop) and SHOP_DOMAIN_PATTERN.match(shop) is not None


async def paginate_query(
    query: Select,
    db: AsyncSession,
    page: int = 1,
    page_size: int = 10
) -> Dict[str, Any]:
    """
    Paginate a SQLAlchemy select.

    Args:
        query: SQLAlchemy select statement
        db: Database session
        page: Page number (1-indexed)
        page_size: Number of items per page

    Returns:
        Dictionary with pagination information and items
    """
    count_query = select(func.count()).select_from(query.order_by(None).subquery())
    total = await db.scalar(count_query) or 0

    offset = (page - 1) * page_size
    result = await db.execute(query.offset(offset).limit(page_size))
    items = result.scalars().all()

    total_pages = (total + page_size - 1) // page_size if total > 0 else 1

    return {
        "items": items,
        "total": total,
        "page": page,
        "page_size": page_size,
        "total_pages": total_pages,
        "has_next": page < total_pages,
        "has_prev": page > 1
    }


def utc_now() -> datetime:
    """Naive UTC timestamp for TIMESTAMP WITHOUT TIME ZONE columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
