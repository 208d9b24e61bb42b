"""
In-process schedule for the price sync job.

The cron endpoint (/api/cron/sync-prices) is the primary trigger. Deployments
without an external cron can set ENABLE_SCHEDULER=true to run the same job
inside the app on PRICE_SYNC_CRON.
"""

import logging
from datetime import datetime
from typing import Optional

from apscheduler.events import EVENT_JOB_ERROR, EVENT_JOB_EXECUTED
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from elite_cards.core.config import get_settings
from elite_cards.database import get_session
from elite_cards.services.pokemon_tcg.client import PokemonTCGClient
from elite_cards.services.price_sync_service import PriceSyncResult, PriceSyncService
from elite_cards.services.shopify.client import ShopifyClient

logger = logging.getLogger(__name__)

# Global scheduler instance
scheduler: Optional[AsyncIOScheduler] = None


async def run_price_sync() -> PriceSyncResult:
    """Run one price sync pass with its own database session."""
    settings = get_settings()
    async with get_session() as db:
        service = PriceSyncService(
            db,
            PokemonTCGClient.from_settings(settings),
            ShopifyClient.from_settings(settings),
            threshold=settings.PRICE_SYNC_THRESHOLD,
            concurrency=settings.PRICE_SYNC_CONCURRENCY,
        )
        return await service.run()


async def price_sync_task():
    """Scheduled wrapper around run_price_sync"""
    try:
        logger.info("=== SCHEDULED PRICE SYNC STARTING ===")
        result = await run_price_sync()
        logger.info(f"{result.message} ({len(result.errors)} errors)")
        for error in result.errors:
            logger.warning(f"Price sync error: {error}")
    except Exception as e:
        logger.exception(f"Error in scheduled price sync task: {str(e)}")


def job_listener(event):
    """Listen to job events for logging"""
    if event.exception:
        logger.error(f"Job {event.job_id} crashed: {event.exception}")
    else:
        logger.info(f"Job {event.job_id} executed successfully at {datetime.now()}")


def create_scheduler() -> AsyncIOScheduler:
    """Create and configure the scheduler"""
    global scheduler

    if scheduler is not None:
        return scheduler

    settings = get_settings()
    scheduler = AsyncIOScheduler()
    scheduler.add_listener(job_listener, EVENT_JOB_EXECUTED | EVENT_JOB_ERROR)

    scheduler.add_job(
        price_sync_task,
        CronTrigger.from_crontab(settings.PRICE_SYNC_CRON),
        id="price_sync",
        name="Price Sync",
        replace_existing=True,
        max_instances=1,
        misfire_grace_time=3600
    )
    logger.info(f"Price sync job scheduled with: {settings.PRICE_SYNC_CRON}")
    return scheduler


async def start_scheduler():
    """Start the scheduler"""
    global scheduler

    if scheduler is None:
        scheduler = create_scheduler()

    if not scheduler.running:
        scheduler.start()
        logger.info("Scheduler started successfully")


async def stop_scheduler():
    """Stop the scheduler gracefully"""
    global scheduler

    if scheduler and scheduler.running:
        scheduler.shutdown(wait=True)
        logger.info("Scheduler stopped successfully")
    scheduler = None
