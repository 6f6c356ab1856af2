# services/lease_service.py
"""
Lease Service - the lease lifecycle.

     draft -> pending_signature -> signed -> active
               (send)             (sign)    (first payment, or manual activate)

Manual deactivation sends an active lease back to draft.
"""
import logging
from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session

from errors import InvalidStateError, NotFoundError, PermissionDeniedError, ValidationError
from models import Lease, Payment, Property, PropertyRequest, User
from models.base import utcnow
from models.lease import LeaseStatus
from models.payment import PaymentStatus, PAYMENT_METHODS
from models.property_request import PropertyRequestStatus
from services.notification_service import NotificationService
from services.payment_service import PaymentService
from utils.currency import format_currency, to_decimal
from utils.dates import add_months

logger = logging.getLogger(__name__)

CURRENT_STATUSES = (
     LeaseStatus.PENDING_SIGNATURE.value,
     LeaseStatus.SIGNED.value,
     LeaseStatus.ACTIVE.value,
)
UPCOMING_PAYMENT_DAYS = 5


class LeaseService:
     """Service class for lease-related business logic."""

     @staticmethod
     def check_access(lease: Lease, actor: dict) -> None:
          role = actor.get("role")
          if role in ("manager", "admin"):
               return
          if role == "landlord" and lease.landlord_id == actor.get("id"):
               return
          if role == "tenant" and lease.tenant_id == actor.get("id"):
               return
          raise PermissionDeniedError("You do not have access to this lease")

     @staticmethod
     def create_lease(db: Session, data: dict, landlord_id: int, note: str = "Lease created") -> Lease:
          """
          Create a draft lease.

          Args:
               data: property_id, tenant_id, start_date, end_date, monthly_rent,
                    security_deposit and optionally payment_due_day, terms,
                    property_request_id

          Raises:
               ValidationError: If the dates or amounts are inconsistent
               NotFoundError: If the property or tenant doesn't exist
               PermissionDeniedError: If the property belongs to another landlord
          """
          start_date, end_date = data["start_date"], data["end_date"]
          if end_date <= start_date:
               raise ValidationError("End date must be after start date", field="end_date")
          due_day = data.get("payment_due_day") or 1
          if not 1 <= due_day <= 31:
               raise ValidationError("Payment due day must be between 1 and 31", field="payment_due_day")
          monthly_rent = to_decimal(data["monthly_rent"])
          deposit = to_decimal(data.get("security_deposit"))
          if monthly_rent < 0 or deposit < 0:
               raise ValidationError("Rent and deposit cannot be negative")

          prop = db.query(Property).filter(Property.id == data["property_id"]).first()
          if not prop:
               raise NotFoundError("Property", data["property_id"])
          if prop.landlord_id != landlord_id:
               raise PermissionDeniedError("You can only create leases for your own properties")
          tenant = db.query(User).filter(User.id == data["tenant_id"], User.role == "tenant").first()
          if not tenant:
               raise NotFoundError("Tenant", data["tenant_id"])

          lease = Lease(
               property_id=prop.id,
               tenant_id=tenant.id,
               landlord_id=landlord_id,
               property_request_id=data.get("property_request_id"),
               start_date=start_date,
               end_date=end_date,
               monthly_rent=monthly_rent,
               security_deposit=deposit,
               payment_due_day=due_day,
               terms=data.get("terms") or {},
               status=LeaseStatus.DRAFT.value,
               first_payment_required=deposit + monthly_rent,
               total_paid=Decimal("0"),
               balance_due=Decimal("0"),
               status_history=[],
          )
          lease.record_status(LeaseStatus.DRAFT.value, landlord_id, note)
          db.add(lease)
          db.flush()
          logger.info("Lease %s created for tenant %s on property %s", lease.id, tenant.id, prop.id)
          return lease

     @staticmethod
     def create_from_property_request(db: Session, property_request_id: int, landlord_id: int, terms: dict) -> Lease:
          request = db.query(PropertyRequest).filter(PropertyRequest.id == property_request_id).first()
          if not request:
               raise NotFoundError("Property request", property_request_id)
          if not request.property_id:
               raise InvalidStateError("Property request has no property attached")

          data = dict(terms)
          data.update(
               property_id=request.property_id,
               tenant_id=request.tenant_id,
               property_request_id=request.id,
          )
          lease = LeaseService.create_lease(db, data, landlord_id, note="Lease created from property request")
          request.status = PropertyRequestStatus.LEASE_REQUESTED.value
          NotificationService.lease_created(db, request.tenant_id, landlord_id, lease.id, request.id)
          return lease

     @staticmethod
     def send_to_tenant(db: Session, lease: Lease, actor: dict, ip_address: str = "") -> Lease:
          if actor.get("role") == "tenant":
               raise PermissionDeniedError("Tenants cannot send leases")
          if not lease.send_to_tenant(ip_address):
               raise InvalidStateError("Only draft leases can be sent to the tenant")
          NotificationService.create_notification(
               db,
               recipient_id=lease.tenant_id,
               sender_id=actor["id"],
               type="lease_approved",
               title="Lease Ready for Signature",
               message="A lease agreement is ready for your review and signature.",
               related_lease_id=lease.id,
               related_document_id=lease.id,
               related_document_model="Lease",
               action_required=True,
               action_url=f"/tenant/leases/{lease.id}",
               priority="high",
          )
          logger.info("Lease %s sent to tenant %s", lease.id, lease.tenant_id)
          return lease

     @staticmethod
     def sign_by_tenant(db: Session, lease: Lease, actor: dict, signature_data: str, ip_address: str,
                        full_name: str = "") -> Lease:
          if actor.get("id") != lease.tenant_id:
               raise PermissionDeniedError("Only the tenant on this lease can sign it")
          if not signature_data:
               raise ValidationError("Signature is required", field="signature_data")
          if not lease.sign_by_tenant(signature_data, ip_address, full_name):
               raise InvalidStateError("Lease is not awaiting signature")

          required = format_currency(lease.first_payment_required)
          NotificationService.create_notification(
               db,
               recipient_id=lease.landlord_id,
               sender_id=lease.tenant_id,
               type="lease_request",
               title="Lease Signed",
               message=f"{full_name or 'The tenant'} has signed the lease. Awaiting first payment of {required}.",
               related_lease_id=lease.id,
               related_document_id=lease.id,
               related_document_model="Lease",
          )
          NotificationService.create_notification(
               db,
               recipient_id=lease.tenant_id,
               type="payment_due",
               title="First Payment Required",
               message=f"Make first payment of {required} (Security deposit + First month rent) to activate your lease.",
               related_lease_id=lease.id,
               related_document_id=lease.id,
               related_document_model="Lease",
               action_required=True,
               action_url=f"/tenant/leases/{lease.id}/payment",
               priority="high",
          )
          logger.info("Lease %s signed by tenant %s", lease.id, lease.tenant_id)
          return lease

     @staticmethod
     def record_first_payment(db: Session, lease: Lease, amount: Decimal, paid_on: Optional[date] = None,
                              recorded_by: Optional[int] = None, payment_method: str = "cash",
                              reference_number: Optional[str] = None) -> Lease:
          """
          Take the deposit + first month payment on a signed lease and activate it.

          A completed Payment is stored alongside when recorded_by is given.

          Raises:
               InvalidStateError: If the lease is not signed
               ValidationError: If amount is below first_payment_required
          """
          amount = to_decimal(amount)
          if lease.status != LeaseStatus.SIGNED.value:
               raise InvalidStateError("Lease must be signed before the first payment")
          if amount < Decimal(lease.first_payment_required):
               raise ValidationError(
                    f"First payment must be at least {format_currency(lease.first_payment_required)}",
                    field="amount",
               )
          if payment_method not in PAYMENT_METHODS:
               raise ValidationError(f"Invalid payment method: {payment_method}", field="payment_method")
          paid_on = paid_on or date.today()
          lease.record_first_payment(amount, paid_on)
          LeaseService._link_tenant(db, lease)
          if recorded_by is not None:
               payment = Payment(
                    receipt_number=PaymentService.generate_receipt_number(db, paid_on),
                    tenant_id=lease.tenant_id,
                    property_id=lease.property_id,
                    lease_id=lease.id,
                    amount=amount,
                    payment_date=paid_on,
                    payment_method=payment_method,
                    payment_type="deposit",
                    reference_number=reference_number,
                    description="Security deposit and first month rent",
                    status=PaymentStatus.COMPLETED.value,
                    approval_status="approved",
                    approved_by=recorded_by,
                    approved_at=utcnow(),
                    recorded_by=recorded_by,
                    approval_history=[],
               )
               payment.record_approval("submitted", recorded_by, "First lease payment")
               db.add(payment)
               db.flush()
          NotificationService.create_notification(
               db,
               recipient_id=lease.landlord_id,
               sender_id=lease.tenant_id,
               type="payment_submitted",
               title="Lease Activated",
               message=f"First payment of {format_currency(amount)} received. The lease is now active.",
               related_lease_id=lease.id,
               related_document_id=lease.id,
               related_document_model="Lease",
          )
          NotificationService.create_notification(
               db,
               recipient_id=lease.tenant_id,
               type="lease_approved",
               title="Lease Activated!",
               message="Your lease is now active. Welcome to your new home!",
               related_lease_id=lease.id,
               related_document_id=lease.id,
               related_document_model="Lease",
               priority="high",
          )
          logger.info("Lease %s activated by first payment of %s", lease.id, amount)
          return lease

     @staticmethod
     def activate(db: Session, lease: Lease, actor: dict, reason: str = "", today: Optional[date] = None) -> Lease:
          """Manual activation override for leases settled outside the system."""
          if lease.status == LeaseStatus.ACTIVE.value:
               raise InvalidStateError("Lease is already active")
          if lease.status in (LeaseStatus.TERMINATED.value, LeaseStatus.EXPIRED.value):
               raise InvalidStateError("Cannot activate terminated or expired lease")
          lease.next_payment_due = LeaseService.calculate_next_payment_due(lease, today)
          lease.record_status(LeaseStatus.ACTIVE.value, actor.get("id"), reason or "Manual activation by landlord")
          LeaseService._link_tenant(db, lease)
          logger.info("Lease %s manually activated by user %s", lease.id, actor.get("id"))
          return lease

     @staticmethod
     def deactivate(db: Session, lease: Lease, actor: dict, reason: str = "") -> Lease:
          if lease.status != LeaseStatus.ACTIVE.value:
               raise InvalidStateError("Only active leases can be deactivated")
          lease.record_status(LeaseStatus.DRAFT.value, actor.get("id"), reason or "Manual deactivation by landlord")
          logger.info("Lease %s manually deactivated by user %s", lease.id, actor.get("id"))
          return lease

     @staticmethod
     def _link_tenant(db: Session, lease: Lease) -> None:
          tenant = db.query(User).filter(User.id == lease.tenant_id).first()
          if tenant:
               tenant.current_lease_id = lease.id
               tenant.current_property_id = lease.property_id
          prop = lease.premises
          if prop is not None:
               prop.is_available = False

     @staticmethod
     def calculate_next_payment_due(lease: Lease, today: Optional[date] = None) -> date:
          """
          Next rent due date on the lease's payment day.

          Before the lease starts this is the first payment day on or after the
          start date; afterwards it is the next payment day strictly after today.
          """
          today = today or date.today()
          due_day = lease.payment_due_day or 1
          if lease.start_date > today:
               first_due = add_months(lease.start_date, 0, day=due_day)
               if first_due < lease.start_date:
                    first_due = add_months(lease.start_date, 1, day=due_day)
               return first_due
          next_due = add_months(today, 0, day=due_day)
          if next_due <= today:
               next_due = add_months(today, 1, day=due_day)
          return next_due

     @staticmethod
     def get_next_action(lease: Lease, today: Optional[date] = None) -> dict:
          today = today or date.today()
          if lease.status == LeaseStatus.DRAFT.value:
               return {"action": "send_to_tenant", "message": "Send lease agreement to tenant for signature", "actor": "landlord"}
          if lease.status == LeaseStatus.PENDING_SIGNATURE.value:
               return {"action": "sign_lease", "message": "Review and sign the lease agreement", "actor": "tenant"}
          if lease.status == LeaseStatus.SIGNED.value:
               return {
                    "action": "make_payment",
                    "message": (f"Make first payment of {format_currency(lease.first_payment_required)} "
                                f"(Security deposit + First month rent)"),
                    "actor": "tenant",
               }
          if lease.status == LeaseStatus.ACTIVE.value:
               days_until_due = (lease.next_payment_due - today).days if lease.next_payment_due else 0
               if days_until_due <= UPCOMING_PAYMENT_DAYS:
                    return {
                         "action": "upcoming_payment",
                         "message": f"Next rent payment due in {days_until_due} days",
                         "actor": "tenant",
                    }
               return {"action": "active_lease", "message": "Lease is active and in good standing", "actor": "both"}
          return {"action": "none", "message": "No action required", "actor": "none"}

     @staticmethod
     def get_tenant_current_lease(db: Session, tenant_id: int) -> Optional[Lease]:
          return (
               db.query(Lease)
               .filter(Lease.tenant_id == tenant_id, Lease.status.in_(CURRENT_STATUSES))
               .order_by(Lease.created_at.desc())
               .first()
          )

     @staticmethod
     def tenants_requiring_action(db: Session, landlord_id: Optional[int] = None) -> list[Lease]:
          """Leases waiting on the tenant: unsigned, or signed without first payment."""
          query = db.query(Lease).filter(
               Lease.status.in_((LeaseStatus.PENDING_SIGNATURE.value, LeaseStatus.SIGNED.value))
          )
          if landlord_id is not None:
               query = query.filter(Lease.landlord_id == landlord_id)
          return query.all()
