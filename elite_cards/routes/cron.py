# elite_cards/routes/cron.py
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, status

from elite_cards.core.config import Settings, get_settings
from elite_cards.core.security import verify_bearer_secret
from elite_cards.dependencies import get_price_sync_service
from elite_cards.services.price_sync_service import PriceSyncService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/cron", tags=["cron"])


def require_cron_secret(
    authorization: Optional[str] = Header(default=None),
    settings: Settings = Depends(get_settings)
) -> None:
    if not settings.CRON_SECRET:
        logger.error("CRON_SECRET is not configured, rejecting cron request")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    if not verify_bearer_secret(authorization, settings.CRON_SECRET):
        logger.warning("Cron request with invalid bearer secret")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")


@router.get("/sync-prices", dependencies=[Depends(require_cron_secret)])
async def sync_prices(price_sync: PriceSyncService = Depends(get_price_sync_service)):
    logger.info("=== SCHEDULED PRICE SYNC STARTING ===")
    result = await price_sync.run()

    if result.total == 0:
        return {"success": True, "message": "No products with auto price sync enabled", "updated": 0}

    response = {"success": True, "message": result.message, "updated": result.updated}
    if result.errors:
        response["errors"] = result.errors
    return response
