"""
Price extraction for Pokemon TCG card payloads.

Real market prices come from the TCGplayer block first, then Cardmarket.
Cards with neither get a synthetic estimate from rarity and set age so the
catalog always has a price to work with.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from elite_cards.schemas.card import CardPricing

TCGPLAYER_PRICE_KEYS = ("normal", "holofoil", "reverseHolofoil")

RARITY_MULTIPLIERS = {
    "Common": 0.1,
    "Uncommon": 0.25,
    "Rare": 0.5,
    "Rare Holo": 1.0,
    "Rare Ultra": 2.0,
    "Rare Secret": 5.0,
    "Amazing Rare": 3.0,
    "Radiant Rare": 2.5,
}

# Vintage sets carry a premium
SET_MULTIPLIERS = {
    "base": 10.0,
    "jungle": 8.0,
    "fossil": 7.0,
    "team-rocket": 6.0,
    "gym-heroes": 5.0,
    "gym-challenge": 5.0,
    "neo-genesis": 4.0,
    "neo-discovery": 4.0,
    "neo-revelation": 4.0,
    "neo-destiny": 4.0,
}

MINIMUM_PRICE = 0.1
LOW_FACTOR = 0.7
HIGH_FACTOR = 1.3


def extract_rarity(card_name: str) -> str:
    """Guess a rarity tier from keywords in the card name."""
    name = (card_name or "").lower()
    if "secret" in name or "rainbow" in name:
        return "Rare Secret"
    if "ultra" in name or "gx" in name or "vmax" in name:
        return "Rare Ultra"
    if "holo" in name or "holographic" in name:
        return "Rare Holo"
    if "amazing" in name:
        return "Amazing Rare"
    if "radiant" in name:
        return "Radiant Rare"
    return "Rare"


def _set_key(set_name: str) -> str:
    return (set_name or "").strip().lower().replace(" ", "-")


def fallback_price(card_name: str, set_name: str, rarity: Optional[str] = None) -> float:
    """
    Synthetic price from rarity and set multipliers.

    Args:
        card_name: Used to infer rarity when none is given
        set_name: Set name, matched against SET_MULTIPLIERS
        rarity: Known rarity, if any

    Returns:
        float: Estimated price, never below MINIMUM_PRICE
    """
    tier = rarity if rarity in RARITY_MULTIPLIERS else extract_rarity(card_name)
    rarity_multiplier = RARITY_MULTIPLIERS.get(tier, 1.0)
    set_multiplier = SET_MULTIPLIERS.get(_set_key(set_name), 1.0)
    return max(MINIMUM_PRICE, rarity_multiplier * set_multiplier)


def fallback_pricing(card_name: str, set_name: str, rarity: Optional[str] = None) -> CardPricing:
    price = fallback_price(card_name, set_name, rarity)
    return CardPricing(
        market_price=price,
        low_price=price * LOW_FACTOR,
        mid_price=price,
        high_price=price * HIGH_FACTOR,
        last_updated=datetime.now(timezone.utc).isoformat(),
        source="fallback",
    )


def extract_pricing(card: Dict[str, Any]) -> CardPricing:
    """
    Pick the best available price block from a raw card payload.

    Args:
        card: Card object as returned by the Pokemon TCG API

    Returns:
        CardPricing
    """
    tcgplayer = card.get("tcgplayer") or {}
    prices = tcgplayer.get("prices") or {}
    for key in TCGPLAYER_PRICE_KEYS:
        block = prices.get(key)
        if not block:
            continue
        market = block.get("market") or block.get("mid")
        if market:
            return CardPricing(
                market_price=float(market),
                low_price=block.get("low"),
                mid_price=block.get("mid"),
                high_price=block.get("high"),
                last_updated=tcgplayer.get("updatedAt"),
                source="tcgplayer",
            )

    cardmarket = card.get("cardmarket") or {}
    cm_prices = cardmarket.get("prices") or {}
    market = cm_prices.get("averageSellPrice") or cm_prices.get("trendPrice")
    if market:
        return CardPricing(
            market_price=float(market),
            low_price=cm_prices.get("lowPrice"),
            mid_price=cm_prices.get("averageSellPrice"),
            high_price=cm_prices.get("suggestedPrice") or cm_prices.get("trendPrice"),
            last_updated=cardmarket.get("updatedAt"),
            source="cardmarket",
        )

    card_set = card.get("set") or {}
    return fallback_pricing(card.get("name", ""), card_set.get("name", ""), card.get("rarity"))
