# Pokemon TCG client unit tests
import httpx
import pytest
from unittest.mock import AsyncMock, MagicMock

from elite_cards.core.exceptions import (
    CardAPIRateLimitError,
    CardAPITimeoutError,
    CardAPIUnavailableError,
)
from elite_cards.services.pokemon_tcg.client import PokemonTCGClient
from elite_cards.services.pokemon_tcg.pricing import (
    MINIMUM_PRICE,
    extract_pricing,
    extract_rarity,
    fallback_price,
)

RAW_CHARIZARD = {
    "id": "base1-4",
    "name": "Charizard",
    "number": "4",
    "rarity": "Rare Holo",
    "set": {"id": "base1", "name": "Base"},
    "images": {"small": "https://images.pokemontcg.io/base1/4.png", "large": "https://images.pokemontcg.io/base1/4_hires.png"},
    "tcgplayer": {
        "updatedAt": "2024/06/01",
        "prices": {"holofoil": {"low": 250.0, "mid": 350.0, "high": 900.0, "market": 375.5}},
    },
}


def _patch_http(mocker, status_code=200, json_data=None, side_effect=None):
    mock_client = mocker.patch("httpx.AsyncClient")
    client_instance = AsyncMock()
    mock_client.return_value.__aenter__.return_value = client_instance
    if side_effect is not None:
        client_instance.request.side_effect = side_effect
    else:
        response = MagicMock()
        response.status_code = status_code
        response.text = ""
        response.json.return_value = json_data
        client_instance.request.return_value = response
    return client_instance


"""
1. Pricing extraction
"""

def test_tcgplayer_market_price_preferred():
    pricing = extract_pricing(RAW_CHARIZARD)

    assert pricing.market_price == 375.5
    assert pricing.low_price == 250.0
    assert pricing.high_price == 900.0
    assert pricing.source == "tcgplayer"


def test_normal_price_block_before_holofoil():
    card = dict(RAW_CHARIZARD, tcgplayer={"prices": {
        "normal": {"market": 1.25},
        "holofoil": {"market": 375.5},
    }})
    assert extract_pricing(card).market_price == 1.25


def test_mid_used_when_market_missing():
    card = dict(RAW_CHARIZARD, tcgplayer={"prices": {"reverseHolofoil": {"mid": 4.5}}})
    assert extract_pricing(card).market_price == 4.5


def test_cardmarket_used_without_tcgplayer():
    card = dict(RAW_CHARIZARD, tcgplayer=None, cardmarket={
        "updatedAt": "2024/06/02",
        "prices": {"averageSellPrice": 310.0, "lowPrice": 200.0, "trendPrice": 320.0},
    })
    pricing = extract_pricing(card)

    assert pricing.market_price == 310.0
    assert pricing.source == "cardmarket"


@pytest.mark.parametrize("set_id,set_name,expected", [
    ("base1", "Base", 10.0),
    ("base2", "Jungle", 8.0),
    ("base3", "Fossil", 7.0),
    ("base5", "Team Rocket", 6.0),
    ("sv1", "Scarlet & Violet", 1.0),
])
def test_fallback_uses_set_name_multiplier(set_id, set_name, expected):
    card = {"id": f"{set_id}-4", "name": "Charizard", "rarity": "Rare Holo", "set": {"id": set_id, "name": set_name}}
    pricing = extract_pricing(card)

    assert pricing.source == "fallback"
    assert pricing.market_price == pytest.approx(expected)


def test_fallback_price_uses_rarity_and_set():
    assert fallback_price("Charizard", "base", "Rare Holo") == pytest.approx(10.0)
    assert fallback_price("Pikachu", "Some Modern Set", "Common") == pytest.approx(MINIMUM_PRICE)
    assert fallback_price("Eevee", "jungle", "Uncommon") == pytest.approx(2.0)


def test_fallback_price_never_below_minimum():
    assert fallback_price("Caterpie", "unknown", "Common") >= MINIMUM_PRICE


@pytest.mark.parametrize("name,expected", [
    ("Charizard Secret", "Rare Secret"),
    ("Pikachu VMAX", "Rare Ultra"),
    ("Mewtwo Holo", "Rare Holo"),
    ("Amazing Rayquaza", "Amazing Rare"),
    ("Radiant Charizard", "Radiant Rare"),
    ("Bulbasaur", "Rare"),
])
def test_extract_rarity(name, expected):
    assert extract_rarity(name) == expected


"""
2. Card transformation
"""

def test_transform_card():
    card = PokemonTCGClient.transform_card(RAW_CHARIZARD)

    assert card.id == "base1-4"
    assert card.set_name == "Base"
    assert card.set_id == "base1"
    assert card.image_url.endswith("4_hires.png")
    assert card.market_price == 375.5


def test_transform_card_defaults():
    card = PokemonTCGClient.transform_card({"id": "xy1-1", "name": "Venusaur EX", "set": {"id": "xy1", "name": "XY"}})

    assert card.rarity == "Unknown"
    assert card.image_url == ""
    assert card.pricing.source == "fallback"


"""
3. Requests and error mapping
"""

@pytest.mark.asyncio
async def test_search_cards(mocker):
    client_instance = _patch_http(mocker, json_data={"data": [RAW_CHARIZARD], "page": 1, "pageSize": 50, "totalCount": 102})

    result = await PokemonTCGClient(api_key="tcg-key").search_cards("name:charizard", page=1, page_size=50)

    assert result.total == 102
    assert [card.id for card in result.cards] == ["base1-4"]
    _, kwargs = client_instance.request.call_args
    assert kwargs["url"] == "https://api.pokemontcg.io/v2/cards"
    assert kwargs["params"] == {"page": 1, "pageSize": 50, "q": "name:charizard"}
    assert kwargs["headers"]["X-Api-Key"] == "tcg-key"


@pytest.mark.asyncio
async def test_no_api_key_header_without_key(mocker):
    client_instance = _patch_http(mocker, json_data={"data": RAW_CHARIZARD})

    await PokemonTCGClient().get_card("base1-4")

    _, kwargs = client_instance.request.call_args
    assert "X-Api-Key" not in kwargs["headers"]
    assert kwargs["url"] == "https://api.pokemontcg.io/v2/cards/base1-4"


@pytest.mark.asyncio
async def test_get_cards_by_set_builds_query(mocker):
    client_instance = _patch_http(mocker, json_data={"data": [], "totalCount": 0})

    await PokemonTCGClient().get_cards_by_set("base1")

    _, kwargs = client_instance.request.call_args
    assert kwargs["params"]["q"] == "set.id:base1"


@pytest.mark.asyncio
async def test_timeout_maps_to_timeout_error(mocker):
    _patch_http(mocker, side_effect=httpx.ReadTimeout("timed out"))

    with pytest.raises(CardAPITimeoutError) as exc_info:
        await PokemonTCGClient().get_sets()

    assert exc_info.value.status_code == 504


@pytest.mark.asyncio
async def test_429_maps_to_rate_limit_error(mocker):
    _patch_http(mocker, status_code=429)

    with pytest.raises(CardAPIRateLimitError) as exc_info:
        await PokemonTCGClient().get_sets()

    assert exc_info.value.status_code == 429


@pytest.mark.asyncio
async def test_server_error_maps_to_unavailable(mocker):
    _patch_http(mocker, status_code=502)

    with pytest.raises(CardAPIUnavailableError) as exc_info:
        await PokemonTCGClient().get_card("base1-4")

    assert exc_info.value.status_code == 503

