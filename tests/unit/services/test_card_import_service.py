# tests/unit/services/test_card_import_service.py
import pytest
from unittest.mock import AsyncMock

from elite_cards.core.exceptions import CardAPIUnavailableError, ValidationError
from elite_cards.services.card_import_service import CardImportService, card_to_product

from conftest import make_card, make_product


def test_card_to_product():
    data = card_to_product(make_card(market_price=375.5))

    assert data.title == "Charizard (Base)"
    assert data.description == "Pokemon TCG Charizard from Base set. Rare Holo rarity card."
    assert data.price == 375.5
    assert data.set_name == "Base"
    assert data.pokemon_card_id == "base1-4"
    assert data.is_single is True
    assert data.auto_price_sync is True
    assert data.market_data.mid_price == 375.5


@pytest.mark.asyncio
async def test_import_card_creates_product():
    products = AsyncMock()
    products.get_product_by_card_id.return_value = None
    products.create_product.return_value = make_product(pokemon_card_id="base1-4")
    cards = AsyncMock()
    cards.get_card.return_value = make_card()

    product = await CardImportService(AsyncMock(), cards, products=products).import_card(
        "base1-4", created_by="admin-1", create_variants=False, auto_price_sync=True
    )

    assert product.pokemon_card_id == "base1-4"
    data = products.create_product.call_args.args[0]
    assert data.is_single is False
    assert products.create_product.call_args.kwargs["created_by"] == "admin-1"


@pytest.mark.asyncio
async def test_import_existing_card_is_rejected():
    products = AsyncMock()
    products.get_product_by_card_id.return_value = make_product()
    cards = AsyncMock()

    with pytest.raises(ValidationError):
        await CardImportService(AsyncMock(), cards, products=products).import_card("base1-4")

    cards.get_card.assert_not_awaited()


@pytest.mark.asyncio
async def test_import_card_without_image_is_rejected():
    products = AsyncMock()
    products.get_product_by_card_id.return_value = None
    cards = AsyncMock()
    cards.get_card.return_value = make_card(image_url="")

    with pytest.raises(ValidationError):
        await CardImportService(AsyncMock(), cards, products=products).import_card("base1-4")

    products.create_product.assert_not_awaited()


@pytest.mark.asyncio
async def test_import_propagates_card_api_errors():
    products = AsyncMock()
    products.get_product_by_card_id.return_value = None
    cards = AsyncMock()
    cards.get_card.side_effect = CardAPIUnavailableError("Pokemon TCG API error: 500")

    with pytest.raises(CardAPIUnavailableError):
        await CardImportService(AsyncMock(), cards, products=products).import_card("base1-4")
