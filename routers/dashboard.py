# routers/dashboard.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from database import get_session
from dependencies import verify_token
from services.dashboard_service import get_dashboard_stats

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@router.get("/stats")
def dashboard_stats(
     refresh: bool = Query(False, description="Bypass the 5 minute cache"),
     db: Session = Depends(get_session),
     token: dict = Depends(verify_token),
):
     return get_dashboard_stats(db, token, force_refresh=refresh)
