"""
Maintenance API router. Admin only.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import get_sweeper, require_admin
from ..models.user import User
from ..schemas.stats import SweepResponse
from ..services.retention import RetentionSweeper

router = APIRouter(prefix="/maintenance", tags=["maintenance"])


@router.post("/cleanup", response_model=SweepResponse)
def run_cleanup(
    db: Session = Depends(get_db),
    sweeper: RetentionSweeper = Depends(get_sweeper),
    admin: User = Depends(require_admin),
):
    """
    Run the retention sweep now.

    Returns 409 if a scheduled or manual sweep is already in progress.
    """
    result = sweeper.sweep(db)
    return SweepResponse(
        measurements_deleted=result.measurements_deleted,
        events_deleted=result.events_deleted,
    )
