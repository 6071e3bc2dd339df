import logging

from fastapi import APIRouter, Depends, Request

from finance_tracker.core.config import settings
from finance_tracker.core.rate_limit import LIMIT_MESSAGE, limiter
from finance_tracker.db.base import Storage
from finance_tracker.db.dynamo import get_storage
from finance_tracker.models.analytics import AnalyticsData
from finance_tracker.models.user import UserInDB
from finance_tracker.routers.deps import get_current_user
from finance_tracker.utils.analyzer import AnalyticsAggregator, FullRecomputeStrategy

router = APIRouter()
logger = logging.getLogger(__name__)
aggregator = AnalyticsAggregator()


@router.get("", response_model=AnalyticsData)
@limiter.limit(settings.ANALYTICS_RATE_LIMIT, error_message=LIMIT_MESSAGE)
def get_analytics(
    request: Request,
    user: UserInDB = Depends(get_current_user),
    store: Storage = Depends(get_storage),
):
    """Balances, month-over-month changes, this month's category split and a six month trend."""
    logger.info(f"Computing analytics for user_id: {user.user_id}")
    return FullRecomputeStrategy(store, aggregator).snapshot(user.user_id)
