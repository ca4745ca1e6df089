"""Manual triggers for scheduled tasks."""

from fastapi import APIRouter

from suiport.api.dependencies import ServicesDep
from suiport.api.schemas import SweepOut, TaskResponse
from suiport.scheduler.jobs import update_zero_price_tokens_job

router = APIRouter(prefix="/scheduled-tasks", tags=["tasks"])


@router.api_route("/update-zero-prices", methods=["GET", "POST"], response_model=TaskResponse)
async def update_zero_prices(services: ServicesDep) -> TaskResponse:
    """Run the zero-price sweep now and report what it changed."""
    result = await update_zero_price_tokens_job(
        sevenk=services.sevenk,
        cache=services.cache,
        retry_policy=services.retry_policy,
    )
    return TaskResponse(
        message="Zero price tokens update completed",
        data=SweepOut.from_result(result),
    )
