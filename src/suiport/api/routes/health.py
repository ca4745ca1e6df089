"""Health check endpoint with database and scheduler status."""

from typing import Any

from fastapi import APIRouter, Request

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(request: Request) -> dict[str, Any]:
    """
    Health check endpoint with database and scheduler status.

    Returns:
        dict with overall status, version, database health, and scheduler info.
    """
    settings = request.app.state.settings
    services = getattr(request.app.state, "services", None)
    if services is None:
        supabase_health: dict[str, Any] = {"status": "disconnected", "healthy": False}
    else:
        supabase_health = await services.supabase.health_check()

    scheduler = getattr(request.app.state, "scheduler", None)
    scheduler_info = {
        "enabled": settings.scheduler_enabled,
        "running": bool(scheduler is not None and scheduler.running),
        "jobs": _job_times(scheduler),
    }

    return {
        "status": "ok" if supabase_health["healthy"] else "degraded",
        "version": settings.app_version,
        "databases": {"supabase": supabase_health},
        "scheduler": scheduler_info,
    }


def _job_times(scheduler: Any) -> dict[str, str | None]:
    """Next run time per job id, ISO formatted."""
    if scheduler is None:
        return {}
    return {
        job.id: job.next_run_time.isoformat() if job.next_run_time else None
        for job in scheduler.get_jobs()
    }
