# services/dashboard_service.py
"""
Dashboard statistics, cached per user for DASHBOARD_CACHE_TTL_SECONDS.
"""
import logging
from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

import config
from models import Invoice, Lease, MaintenanceRequest, Payment, Property
from models.base import utcnow
from models.invoice import InvoiceStatus
from models.lease import LeaseStatus
from models.payment import PaymentStatus
from services.payment_service import PaymentService
from utils.cache import TTLCache, generate_cache_key
from utils.currency import to_decimal

logger = logging.getLogger(__name__)

stats_cache = TTLCache(default_ttl=config.DASHBOARD_CACHE_TTL_SECONDS)


def get_dashboard_stats(db: Session, user: dict, force_refresh: bool = False, today: Optional[date] = None) -> dict:
     """
     Headline numbers for the dashboard, scoped to the caller.

     Landlords see their own portfolio, tenants their own account and
     managers/admins the whole system.

     Returns:
          The stats dict plus "cached" telling whether it came from the cache
     """
     key = generate_cache_key("dashboard-stats", user=user.get("id"), role=user.get("role"))
     if not force_refresh:
          cached = stats_cache.get(key)
          if cached is not None:
               return {**cached, "cached": True}
     else:
          stats_cache.delete(key)

     stats = _compute_stats(db, user, today or date.today())
     stats_cache.set(key, stats)
     logger.info("Dashboard stats refreshed for user %s", user.get("id"))
     return {**stats, "cached": False}


def _compute_stats(db: Session, user: dict, today: date) -> dict:
     role = user.get("role")
     user_id = user.get("id")

     property_query = db.query(Property.id)
     lease_query = db.query(Lease).filter(Lease.status == LeaseStatus.ACTIVE.value)
     maintenance_query = db.query(func.count(MaintenanceRequest.id)).filter(MaintenanceRequest.status == "Pending")
     overdue_query = db.query(Invoice).filter(Invoice.status == InvoiceStatus.OVERDUE.value)
     pending_payments_query = db.query(func.count(Payment.id)).filter(Payment.status == PaymentStatus.PENDING.value)

     if role == "landlord":
          property_query = property_query.filter(Property.landlord_id == user_id)
          lease_query = lease_query.filter(Lease.landlord_id == user_id)
          maintenance_query = maintenance_query.filter(MaintenanceRequest.landlord_id == user_id)
          overdue_query = overdue_query.join(Property, Invoice.property_id == Property.id).filter(
               Property.landlord_id == user_id
          )
          pending_payments_query = pending_payments_query.join(Property, Payment.property_id == Property.id).filter(
               Property.landlord_id == user_id
          )
     elif role == "tenant":
          property_query = property_query.join(Lease, Lease.property_id == Property.id).filter(
               Lease.tenant_id == user_id, Lease.status == LeaseStatus.ACTIVE.value
          )
          lease_query = lease_query.filter(Lease.tenant_id == user_id)
          maintenance_query = maintenance_query.filter(MaintenanceRequest.tenant_id == user_id)
          overdue_query = overdue_query.filter(Invoice.tenant_id == user_id)
          pending_payments_query = pending_payments_query.filter(Payment.tenant_id == user_id)

     property_ids = [row[0] for row in property_query.all()]
     active_leases = lease_query.all()
     overdue_invoices = overdue_query.all()

     properties_count = len(property_ids)
     occupied = len({lease.property_id for lease in active_leases})
     occupancy_rate = round(occupied / properties_count * 100) if properties_count else 0
     monthly_rent = sum((Decimal(lease.monthly_rent or 0) for lease in active_leases), Decimal("0"))

     month_start = today.replace(day=1)
     scope = None if role in ("admin", "manager") else property_ids
     collected = PaymentService.total_by_period(db, month_start, today, scope)
     collection_rate = round(collected["total_amount"] / monthly_rent * 100) if monthly_rent else 0

     return {
          "properties": properties_count,
          "active_leases": len(active_leases),
          "tenants": len({lease.tenant_id for lease in active_leases}),
          "occupancy_rate": occupancy_rate,
          "monthly_rent": to_decimal(monthly_rent),
          "this_month_collected": collected["total_amount"],
          "this_month_payments": collected["count"],
          "collection_rate": int(collection_rate),
          "pending_payments": pending_payments_query.scalar() or 0,
          "pending_maintenance": maintenance_query.scalar() or 0,
          "overdue_invoices": len(overdue_invoices),
          "overdue_amount": to_decimal(sum((inv.outstanding_amount for inv in overdue_invoices), Decimal("0"))),
          "currency": config.DEFAULT_CURRENCY,
          "last_updated": utcnow().isoformat(),
     }
