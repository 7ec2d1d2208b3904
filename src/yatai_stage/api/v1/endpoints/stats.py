# src/yatai_stage/api/v1/endpoints/stats.py
"""Creator statistics endpoint."""

from fastapi import APIRouter

from yatai_stage.api.v1.dependencies import CurrentUserDep, SessionDep
from yatai_stage.core.settings import settings
from yatai_stage.schemas.common import DataResponse
from yatai_stage.schemas.stats import CreatorStats
from yatai_stage.services.impressions import impressions_by_day
from yatai_stage.services.users import followers_by_day

router = APIRouter(prefix="/stats", tags=["stats"])


@router.get("", response_model=DataResponse[CreatorStats])
async def get_stats(current_user: CurrentUserDep, db: SessionDep) -> DataResponse[CreatorStats]:
    """Return per-day impressions of the caller's posts and new followers."""
    return DataResponse(
        data=CreatorStats(
            impressions=impressions_by_day(
                db, current_user.id, settings.impression_report_divisor
            ),
            followers=followers_by_day(db, current_user.id, settings.local_timezone),
        )
    )
