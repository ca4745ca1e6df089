"""Scheduled price jobs.

- SUI price sampling (every 5 minutes): appends the 7k SUI price to
  ``sui_price_history``.
- Zero-price sweep (every 30 minutes): reprices token records stored with
  price 0 by the wallet aggregation.

Jobs receive their collaborators as arguments and handle all errors
internally to prevent job crashes.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

import structlog
from apscheduler.triggers.cron import CronTrigger

from suiport.core.clock import utc_now
from suiport.core.exceptions import StorageError
from suiport.core.retry import RetryPolicy
from suiport.core.validation import is_usable_price

if TYPE_CHECKING:
    from apscheduler.schedulers.asyncio import AsyncIOScheduler

    from suiport.data.supabase.repositories.sui_price_repo import SuiPriceRepository
    from suiport.services.container import ServiceContainer
    from suiport.services.pricing.cache import PriceCache
    from suiport.services.sevenk.client import SevenKPriceClient

log = structlog.get_logger(__name__)

# Job ID constants
JOB_ID_SUI_PRICE = "sui_price_update"
JOB_ID_ZERO_PRICE_SWEEP = "zero_price_sweep"

SUI_PRICE_CRON = "*/5 * * * *"
ZERO_PRICE_SWEEP_CRON = "*/30 * * * *"


@dataclass
class SweepResult:
    """Outcome of one zero-price sweep."""

    checked: int = 0
    updated: int = 0
    failed: int = 0


async def update_sui_price_job(
    sevenk: SevenKPriceClient,
    sui_price_repo: SuiPriceRepository,
    retry_policy: RetryPolicy | None = None,
    clock: Callable[[], datetime] = utc_now,
) -> float | None:
    """Sample the SUI price and append it to the price history.

    Returns:
        The stored price, or None when no usable price was obtained.
    """
    retry = retry_policy or RetryPolicy()
    log.info("sui_price_job_started")

    price = await retry.run(sevenk.get_sui_price, name="sevenk_sui_price")
    if not is_usable_price(price):
        log.warning("sui_price_job_invalid_price", price=price)
        return None

    try:
        await sui_price_repo.add(price, created_at=clock())
    except StorageError as e:
        log.error("sui_price_job_failed", error=str(e))
        return None

    log.info("sui_price_job_completed", price=price)
    return price


async def update_zero_price_tokens_job(
    sevenk: SevenKPriceClient,
    cache: PriceCache,
    retry_policy: RetryPolicy | None = None,
) -> SweepResult:
    """Reprice every token record stored with price 0.

    Records for which no usable price is found are left untouched.
    A failure on one token does not stop the sweep.
    """
    retry = retry_policy or RetryPolicy()
    result = SweepResult()
    log.info("zero_price_sweep_started")

    try:
        coin_types = await cache.list_zero_priced()
    except StorageError as e:
        log.error("zero_price_sweep_failed", error=str(e))
        return result

    for coin_type in coin_types:
        result.checked += 1
        price = await retry.run(
            lambda ct=coin_type: sevenk.get_token_price(ct),
            name="sevenk_price",
        )
        if not is_usable_price(price):
            log.debug("zero_price_token_still_unpriced", coin_type=coin_type, price=price)
            continue

        try:
            await cache.put(coin_type, price)
        except StorageError as e:
            result.failed += 1
            log.error("zero_price_token_update_failed", coin_type=coin_type, error=str(e))
            continue

        result.updated += 1
        log.info("zero_price_token_updated", coin_type=coin_type, price=price)

    log.info(
        "zero_price_sweep_completed",
        checked=result.checked,
        updated=result.updated,
        failed=result.failed,
    )
    return result


def register_price_jobs(scheduler: AsyncIOScheduler, services: ServiceContainer) -> None:
    """Add both price jobs to ``scheduler``, replacing existing ones."""
    scheduler.add_job(
        update_sui_price_job,
        trigger=CronTrigger.from_crontab(SUI_PRICE_CRON, timezone="UTC"),
        kwargs={
            "sevenk": services.sevenk,
            "sui_price_repo": services.sui_price_repo,
            "retry_policy": services.retry_policy,
        },
        id=JOB_ID_SUI_PRICE,
        name="SUI Price Update",
        replace_existing=True,
    )
    scheduler.add_job(
        update_zero_price_tokens_job,
        trigger=CronTrigger.from_crontab(ZERO_PRICE_SWEEP_CRON, timezone="UTC"),
        kwargs={
            "sevenk": services.sevenk,
            "cache": services.cache,
            "retry_policy": services.retry_policy,
        },
        id=JOB_ID_ZERO_PRICE_SWEEP,
        name="Zero Price Sweep",
        replace_existing=True,
    )

    log.info(
        "price_jobs_scheduled",
        job_ids=[JOB_ID_SUI_PRICE, JOB_ID_ZERO_PRICE_SWEEP],
    )
