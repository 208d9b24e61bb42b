# tests/unit/core/test_utils.py
import pytest
from unittest.mock import AsyncMock, MagicMock
from sqlalchemy import select

from elite_cards.core.config import Settings
from elite_cards.core.utils import is_valid_shop_domain, normalize_shop_domain, paginate_query
from elite_cards.models.product import Product


@pytest.mark.parametrize("raw,expected", [
    ("card-shop", "card-shop.myshopify.com"),
    ("Card-Shop.myshopify.com", "card-shop.myshopify.com"),
    ("https://card-shop.myshopify.com/", "card-shop.myshopify.com"),
    ("  card-shop  ", "card-shop.myshopify.com"),
])
def test_normalize_shop_domain(raw, expected):
    assert normalize_shop_domain(raw) == expected


@pytest.mark.parametrize("shop,valid", [
    ("card-shop.myshopify.com", True),
    ("shop1.myshopify.com", True),
    ("-card-shop.myshopify.com", False),
    ("card-shop.example.com", False),
    ("card_shop.myshopify.com", False),
    ("evil.com/.myshopify.com", False),
    ("", False),
])
def test_is_valid_shop_domain(shop, valid):
    assert is_valid_shop_domain(shop) is valid


def _session(total, items):
    db = AsyncMock()
    db.scalar.return_value = total
    result = MagicMock()
    result.scalars.return_value.all.return_value = items
    db.execute.return_value = result
    return db


@pytest.mark.asyncio
async def test_paginate_query():
    db = _session(26, ["a"])

    page = await paginate_query(select(Product), db, page=2, page_size=25)

    assert page["items"] == ["a"]
    assert page["total"] == 26
    assert page["total_pages"] == 2
    assert page["has_next"] is False
    assert page["has_prev"] is True


@pytest.mark.asyncio
async def test_paginate_empty_query():
    page = await paginate_query(select(Product), _session(0, []), page=1, page_size=25)

    assert page["total"] == 0
    assert page["total_pages"] == 1
    assert page["has_next"] is False


def test_settings_parse_admin_domains():
    settings = Settings(ADMIN_SHOP_DOMAINS=" Owner-Store.myshopify.com, second.myshopify.com ,")

    assert settings.admin_shop_domains == ["owner-store.myshopify.com", "second.myshopify.com"]
    assert Settings(SHOPIFY_SCOPES="read_products, write_products").shopify_scope_list == ["read_products", "write_products"]
