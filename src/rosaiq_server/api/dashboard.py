"""
Dashboard summary API router.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..config import settings
from ..database import get_db
from ..dependencies import get_current_user
from ..models.user import User
from ..schemas.stats import SummaryResponse
from ..services.stats_service import fleet_summary

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/summary", response_model=SummaryResponse)
def get_summary(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Fleet summary over the devices visible to the caller.

    - **activeDevices**: contact within ACTIVE_WINDOW_MINUTES
    - **averages**: mean of per-device averages; co2 as an integer, pm25 to one decimal
    """
    return fleet_summary(db, current_user, settings.ACTIVE_WINDOW_MINUTES)
