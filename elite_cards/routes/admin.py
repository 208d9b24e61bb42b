# elite_cards/routes/admin.py
import logging

from fastapi import APIRouter, Depends

from elite_cards.core.exceptions import UserNotFoundError
from elite_cards.dependencies import get_store_sync_service, get_user_service, require_admin
from elite_cards.schemas.session import SessionClaims
from elite_cards.schemas.user import PromoteUserRequest, PushToUserRequest, UserRead
from elite_cards.services.store_sync_service import StoreSyncService
from elite_cards.services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"], dependencies=[Depends(require_admin)])


@router.get("/users")
async def list_users(user_service: UserService = Depends(get_user_service)):
    users = await user_service.list_users()
    return {"users": [UserRead.model_validate(user).model_dump(mode="json") for user in users]}


@router.post("/promote-user")
async def promote_user(
    payload: PromoteUserRequest,
    session: SessionClaims = Depends(require_admin),
    user_service: UserService = Depends(get_user_service)
):
    user = await user_service.update_user_role(payload.shop_domain, payload.new_role)
    logger.info(f"{session.shop_domain} set role of {user.shop_domain} to {user.role}")
    return {
        "success": True,
        "message": f"User {user.shop_domain} role updated to {user.role}",
        "user": UserRead.model_validate(user).model_dump(mode="json"),
    }


@router.post("/push-to-user")
async def push_to_user(
    payload: PushToUserRequest,
    session: SessionClaims = Depends(require_admin),
    user_service: UserService = Depends(get_user_service),
    store_sync: StoreSyncService = Depends(get_store_sync_service)
):
    """Push a catalog product to any merchant's store."""
    user = await user_service.get_user_by_id(payload.user_id)
    if user is None:
        raise UserNotFoundError(f"User not found: {payload.user_id}")

    result = await store_sync.push_product_by_id(payload.product_id, user)
    return {
        "success": True,
        "message": f"Product pushed to {user.shop_domain}",
        "shopifyProductId": result.shopify_product_id,
    }
