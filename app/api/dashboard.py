from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from app.db.base import get_db
from app.core.dependencies import get_current_user
from app.models.user import User
from app.schemas.koperasi import DashboardStatsResponse
from app.services.reporting import get_dashboard_stats
from app.services.search import global_search

router = APIRouter(prefix="/api", tags=["dashboard"])


@router.get("/dashboard/stats", response_model=DashboardStatsResponse)
def dashboard_stats(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Member and loan totals for the dashboard."""
    return get_dashboard_stats(db)


@router.get("/search")
def search(
    q: str = Query("", description="At least 2 characters"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Search loans and members by name, NIK or phone."""
    return {"results": global_search(db, q)}
