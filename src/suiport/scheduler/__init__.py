"""Background price jobs on APScheduler."""

from suiport.scheduler.jobs import (
    SweepResult,
    register_price_jobs,
    update_sui_price_job,
    update_zero_price_tokens_job,
)
from suiport.scheduler.scheduler import create_scheduler, shutdown_scheduler, start_scheduler

__all__ = [
    "SweepResult",
    "create_scheduler",
    "register_price_jobs",
    "shutdown_scheduler",
    "start_scheduler",
    "update_sui_price_job",
    "update_zero_price_tokens_job",
]
