from typing import List

from fastapi import APIRouter, Depends

from app.api.deps import get_earnings
from app.schemas.earnings import WeeklyEarnings
from app.services.earnings_aggregator import EarningsAggregator

router = APIRouter()


@router.get("/{driver_id}", response_model=List[WeeklyEarnings])
def get_weekly_earnings(driver_id: int, aggregator: EarningsAggregator = Depends(get_earnings)):
    """
    Earnings for the last four calendar weeks, current week first.

    Weeks run Monday 00:00 to the next Monday in the configured timezone.
    Only finished work sessions count towards hours online.
    """
    return aggregator.get_weekly_earnings(driver_id)
