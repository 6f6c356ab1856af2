# routers/exchange_rate.py
from fastapi import APIRouter, Query

from services.exchange_rate_service import get_exchange_rate

router = APIRouter(prefix="/api/exchange-rate", tags=["exchange-rate"])


@router.get("")
def exchange_rate(
     base: str = Query("USD", min_length=3, max_length=3),
     target: str = Query("ZMW", min_length=3, max_length=3),
):
     """Current rate for one unit of `base` in `target`. No authentication required."""
     return get_exchange_rate(base, target)
