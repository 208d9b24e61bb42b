# elite_cards/routes/pokemon_tcg.py
"""
Admin proxy over the Pokemon TCG API, plus importing cards into the catalog.

Card API failures surface through the app's error handlers as
504 (timeout), 429 (rate limited) or 503 (unavailable).
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from elite_cards.dependencies import get_card_client, get_card_import_service, require_admin
from elite_cards.schemas.card import AddCardToCatalogRequest
from elite_cards.schemas.product import ProductRead
from elite_cards.schemas.session import SessionClaims
from elite_cards.services.card_import_service import CardImportService
from elite_cards.services.pokemon_tcg.client import PokemonTCGClient

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/pokemon-tcg", tags=["pokemon-tcg"], dependencies=[Depends(require_admin)])


@router.get("/search")
async def search_cards(
    q: str = "",
    set_id: Optional[str] = Query(default=None, alias="setId"),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=50, ge=1, le=250, alias="pageSize"),
    cards: PokemonTCGClient = Depends(get_card_client)
):
    if set_id:
        result = await cards.get_cards_by_set(set_id, page=page, page_size=page_size)
    else:
        result = await cards.search_cards(q, page=page, page_size=page_size)

    return {
        "success": True,
        "cards": [card.model_dump(by_alias=True, mode="json") for card in result.cards],
        "pagination": {"page": result.page, "pageSize": result.page_size, "total": result.total},
    }


@router.get("/sets")
async def list_sets(cards: PokemonTCGClient = Depends(get_card_client)):
    sets = await cards.get_sets()
    return {"success": True, "sets": [card_set.model_dump(mode="json") for card_set in sets]}


@router.get("/cards/{card_id}")
async def get_card(card_id: str, cards: PokemonTCGClient = Depends(get_card_client)):
    card = await cards.get_card(card_id)
    return {"success": True, "card": card.model_dump(by_alias=True, mode="json")}


@router.post("/add-to-catalog")
async def add_to_catalog(
    payload: AddCardToCatalogRequest,
    session: SessionClaims = Depends(require_admin),
    import_service: CardImportService = Depends(get_card_import_service)
):
    product = await import_service.import_card(
        payload.pokemon_card_id,
        created_by=session.user_id,
        create_variants=payload.create_variants,
        auto_price_sync=payload.auto_price_sync,
    )
    return {
        "success": True,
        "message": f"Added {product.title} to the catalog",
        "product": ProductRead.model_validate(product).to_response(),
    }
