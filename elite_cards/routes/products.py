# elite_cards/routes/products.py
"""
Catalog CRUD (admin) and merchant store actions (any signed-in merchant).
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from elite_cards.dependencies import (
    get_current_session,
    get_current_user,
    get_linkage_service,
    get_product_service,
    get_store_sync_service,
    require_admin,
)
from elite_cards.models.user import User
from elite_cards.schemas.product import (
    ProductCreate,
    ProductIdRequest,
    ProductRead,
    ProductUpdate,
    SetRequest,
)
from elite_cards.schemas.session import SessionClaims
from elite_cards.services.linkage_service import LinkageService
from elite_cards.services.product_service import ProductService
from elite_cards.services.store_sync_service import StoreSyncService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/products", tags=["products"])


def _product_response(product) -> dict:
    return ProductRead.model_validate(product).to_response()


# --- Catalog (admin) ---

@router.post("/add")
async def add_product(
    product_data: ProductCreate,
    session: SessionClaims = Depends(require_admin),
    product_service: ProductService = Depends(get_product_service)
):
    product = await product_service.create_product(product_data, created_by=session.user_id)
    return {"success": True, "product": _product_response(product)}


@router.put("/update")
async def update_product(
    update: ProductUpdate,
    session: SessionClaims = Depends(require_admin),
    product_service: ProductService = Depends(get_product_service)
):
    product = await product_service.update_product(update)
    return {"success": True, "product": _product_response(product)}


@router.delete("/delete/{product_id}")
async def delete_product(
    product_id: str,
    session: SessionClaims = Depends(require_admin),
    product_service: ProductService = Depends(get_product_service)
):
    await product_service.delete_product(product_id)
    return {"success": True}


# --- Browsing (any session) ---

@router.get("/list")
async def list_products(
    set_name: Optional[str] = Query(default=None, alias="set"),
    session: SessionClaims = Depends(get_current_session),
    product_service: ProductService = Depends(get_product_service)
):
    grouped = await product_service.list_products_by_set(set_name)
    return {
        "products": {
            name: [_product_response(product) for product in products]
            for name, products in grouped.items()
        }
    }


@router.get("/search")
async def search_products(
    q: str = "",
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=25, ge=1, le=250),
    session: SessionClaims = Depends(get_current_session),
    product_service: ProductService = Depends(get_product_service)
):
    result = await product_service.search_products(q, page=page, page_size=limit)
    return {
        "products": [_product_response(product) for product in result["items"]],
        "pagination": {
            "currentPage": result["page"],
            "totalPages": result["total_pages"],
            "totalItems": result["total"],
            "itemsPerPage": result["page_size"],
            "hasNextPage": result["has_next"],
            "hasPrevPage": result["has_prev"],
        },
    }


# --- Merchant store actions ---

@router.get("/added")
async def get_added_products(
    user: User = Depends(get_current_user),
    linkage_service: LinkageService = Depends(get_linkage_service)
):
    return {"addedProductIds": await linkage_service.get_added_product_ids(user.id)}


@router.post("/push")
async def push_product(
    payload: ProductIdRequest,
    user: User = Depends(get_current_user),
    store_sync: StoreSyncService = Depends(get_store_sync_service)
):
    result = await store_sync.push_product_by_id(payload.product_id, user)
    return {
        "success": True,
        "message": "Product added to your store",
        "shopifyProductId": result.shopify_product_id,
    }


@router.post("/remove")
async def remove_product(
    payload: ProductIdRequest,
    user: User = Depends(get_current_user),
    store_sync: StoreSyncService = Depends(get_store_sync_service)
):
    await store_sync.remove_product_from_user(user, payload.product_id)
    return {"success": True, "message": "Product removed from your store"}


@router.post("/add-all-from-set")
async def add_all_from_set(
    payload: SetRequest,
    user: User = Depends(get_current_user),
    store_sync: StoreSyncService = Depends(get_store_sync_service)
):
    result = await store_sync.add_all_from_set(user, payload.set_name)
    return {
        "success": True,
        "message": result.message,
        "results": result.model_dump(by_alias=True, include={"successful", "failed", "already_added"}),
    }


@router.post("/remove-all-from-set")
async def remove_all_from_set(
    payload: SetRequest,
    user: User = Depends(get_current_user),
    store_sync: StoreSyncService = Depends(get_store_sync_service)
):
    result = await store_sync.remove_all_from_set(user, payload.set_name)
    return {
        "success": True,
        "message": result.message,
        "results": result.model_dump(by_alias=True, include={"successful", "failed", "not_found"}),
    }
