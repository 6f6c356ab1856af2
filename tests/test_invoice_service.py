from datetime import date, timedelta
from decimal import Decimal

import pytest

from errors import InvalidStateError, NotFoundError, PermissionDeniedError, ValidationError
from models import Invoice, Notification, Payment
from services.invoice_service import InvoiceService
from tests.conftest import actor


def _create(db, tenant, prop, landlord, **overrides):
     params = dict(
          tenant_id=tenant.id,
          property_id=prop.id,
          items=[
               {"description": "Monthly Rent", "quantity": 1, "unit_price": Decimal("5000")},
               {"description": "Water", "quantity": 2, "unit_price": Decimal("125.50")},
          ],
          due_date=date.today() + timedelta(days=10),
          created_by=landlord.id,
          tax_amount=Decimal("100"),
     )
     params.update(overrides)
     invoice = InvoiceService.create_invoice(db, **params)
     db.commit()
     return invoice


def test_create_invoice_computes_totals(db, tenant, prop, landlord):
     invoice = _create(db, tenant, prop, landlord)

     assert invoice.subtotal == Decimal("5251.00")
     assert invoice.total_amount == Decimal("5351.00")
     assert invoice.status == "draft"
     assert invoice.approval_status == "pending"
     assert invoice.approval_history[0]["action"] == "submitted"
     assert [item.amount for item in invoice.items] == [Decimal("5000.00"), Decimal("251.00")]


def test_invoice_numbers_are_sequential_within_month(db, tenant, prop, landlord):
     issue = date(2025, 6, 3)
     first = _create(db, tenant, prop, landlord, issue_date=issue, due_date=issue + timedelta(days=7))
     second = _create(db, tenant, prop, landlord, issue_date=issue, due_date=issue + timedelta(days=7))
     july = _create(db, tenant, prop, landlord, issue_date=date(2025, 7, 1), due_date=date(2025, 7, 10))

     assert first.invoice_number == "INV-202506-0001"
     assert second.invoice_number == "INV-202506-0002"
     assert july.invoice_number == "INV-202507-0001"


def test_create_invoice_validation(db, tenant, prop, landlord):
     with pytest.raises(ValidationError):
          _create(db, tenant, prop, landlord, items=[])
     with pytest.raises(ValidationError):
          _create(db, tenant, prop, landlord, issue_date=date(2025, 5, 10), due_date=date(2025, 5, 1))
     with pytest.raises(NotFoundError):
          _create(db, tenant, prop, landlord, tenant_id=9999)


def test_send_invoice_notifies_tenant_and_sender(db, tenant, prop, landlord):
     invoice = _create(db, tenant, prop, landlord)

     InvoiceService.send_invoice(db, invoice, actor(landlord))
     db.commit()

     assert invoice.status == "sent"
     assert invoice.approval_status == "approved"
     assert invoice.sent_at is not None
     tenant_notice = db.query(Notification).filter(Notification.recipient_id == tenant.id).one()
     assert tenant_notice.type == "invoice_created"
     assert tenant_notice.action_required is True
     assert invoice.invoice_number in tenant_notice.message
     assert db.query(Notification).filter(Notification.recipient_id == landlord.id).count() == 1


def test_send_invoice_twice_is_rejected(db, tenant, prop, landlord):
     invoice = _create(db, tenant, prop, landlord)
     InvoiceService.send_invoice(db, invoice, actor(landlord))

     with pytest.raises(InvalidStateError):
          InvoiceService.send_invoice(db, invoice, actor(landlord))


def test_approve_and_reject_need_staff(db, tenant, prop, landlord, manager):
     invoice = _create(db, tenant, prop, landlord)
     with pytest.raises(PermissionDeniedError):
          InvoiceService.approve_invoice(db, invoice, actor(landlord))

     InvoiceService.approve_invoice(db, invoice, actor(manager), "Looks right")
     assert invoice.approval_status == "approved"
     assert invoice.approved_by == manager.id
     # Approved invoices are still drafts until sent
     assert invoice.status == "draft"

     with pytest.raises(InvalidStateError):
          InvoiceService.reject_invoice(db, invoice, actor(manager), "Too late")


def test_mark_paid_partial_then_full(db, tenant, prop, landlord):
     invoice = _create(db, tenant, prop, landlord, tax_amount=Decimal("0"),
                       items=[{"description": "Rent", "quantity": 1, "unit_price": Decimal("1000")}])
     InvoiceService.send_invoice(db, invoice, actor(landlord))

     first = InvoiceService.mark_paid(db, invoice, actor(landlord), amount=Decimal("300"))
     assert invoice.status == "sent"
     assert invoice.outstanding_amount == Decimal("700")
     assert first.status == "completed"
     assert first.receipt_number.startswith("PAY-")

     with pytest.raises(ValidationError):
          InvoiceService.mark_paid(db, invoice, actor(landlord), amount=Decimal("800"))

     InvoiceService.mark_paid(db, invoice, actor(landlord))
     db.commit()
     assert invoice.status == "paid"
     assert invoice.outstanding_amount == Decimal("0")
     assert db.query(Payment).filter(Payment.invoice_id == invoice.id).count() == 2


def test_mark_paid_requires_open_invoice(db, tenant, prop, landlord):
     invoice = _create(db, tenant, prop, landlord)
     with pytest.raises(InvalidStateError):
          InvoiceService.mark_paid(db, invoice, actor(landlord))
     with pytest.raises(PermissionDeniedError):
          InvoiceService.mark_paid(db, invoice, actor(tenant))


def test_cancel_paid_invoice_is_refused(db, tenant, prop, landlord, admin):
     invoice = _create(db, tenant, prop, landlord)
     InvoiceService.send_invoice(db, invoice, actor(landlord))
     InvoiceService.mark_paid(db, invoice, actor(landlord))

     with pytest.raises(InvalidStateError):
          InvoiceService.cancel_invoice(db, invoice, actor(admin), "Mistake")


def test_cancel_sent_invoice_tells_tenant(db, tenant, prop, landlord, admin):
     invoice = _create(db, tenant, prop, landlord)
     InvoiceService.send_invoice(db, invoice, actor(landlord))

     InvoiceService.cancel_invoice(db, invoice, actor(admin), "Billed twice")
     db.commit()

     assert invoice.status == "cancelled"
     assert invoice.rejection_reason == "Billed twice"
     messages = [n.message for n in db.query(Notification).filter(Notification.recipient_id == tenant.id)]
     assert any("has been cancelled" in m for m in messages)


def test_reminder_on_overdue_invoice_is_high_priority(db, tenant, prop, landlord):
     invoice = _create(db, tenant, prop, landlord, issue_date=date(2025, 1, 1), due_date=date(2025, 1, 10))
     InvoiceService.send_invoice(db, invoice, actor(landlord))
     invoice.mark_as_overdue()

     count = InvoiceService.send_reminder(db, invoice, actor(landlord), today=date(2025, 1, 20))
     db.commit()

     assert count == 1
     reminder = (
          db.query(Notification)
          .filter(Notification.recipient_id == tenant.id, Notification.type == "payment_due")
          .one()
     )
     assert reminder.priority == "high"
     assert "10 days overdue" in reminder.message


def test_duplicate_invoice_is_new_draft(db, tenant, prop, landlord):
     invoice = _create(db, tenant, prop, landlord)
     InvoiceService.send_invoice(db, invoice, actor(landlord))

     copy = InvoiceService.duplicate_invoice(db, invoice, actor(landlord))
     db.commit()

     assert copy.id != invoice.id
     assert copy.status == "draft"
     assert copy.total_amount == invoice.total_amount
     assert copy.due_date == date.today() + timedelta(days=30)
     assert len(copy.approval_history) == 1


def test_update_invoice_only_for_drafts(db, tenant, prop, landlord):
     invoice = _create(db, tenant, prop, landlord)
     InvoiceService.update_invoice(db, invoice, {
          "items": [{"description": "Rent", "quantity": 1, "unit_price": Decimal("4000")}],
          "tax_amount": Decimal("0"),
     })
     assert invoice.total_amount == Decimal("4000")

     InvoiceService.send_invoice(db, invoice, actor(landlord))
     with pytest.raises(InvalidStateError):
          InvoiceService.update_invoice(db, invoice, {"notes": "late edit"})


def test_generate_monthly_invoices_once_per_period(db, active_lease, landlord):
     today = date(2026, 2, 20)

     created = InvoiceService.generate_monthly_invoices(db, today=today)
     db.commit()
     assert len(created) == 1
     invoice = created[0]
     assert invoice.due_date == date(2026, 3, 10)
     assert invoice.items[0].period_start == date(2026, 3, 1)
     assert invoice.items[0].period_end == date(2026, 3, 31)
     assert invoice.total_amount == Decimal("5000.00")

     again = InvoiceService.generate_monthly_invoices(db, today=today)
     assert again == []
     assert db.query(Invoice).count() == 1


def test_generate_monthly_invoices_skips_inactive_leases(db, active_lease):
     active_lease.status = "draft"
     db.commit()

     assert InvoiceService.generate_monthly_invoices(db, today=date(2026, 2, 20)) == []


def test_generate_monthly_invoices_uses_lease_end_against_today(db, active_lease):
     active_lease.end_date = date(2026, 2, 25)
     db.commit()

     assert InvoiceService.generate_monthly_invoices(db, today=date(2026, 2, 26)) == []
     assert len(InvoiceService.generate_monthly_invoices(db, today=date(2026, 2, 20))) == 1


def test_mark_overdue_invoices(db, tenant, prop, landlord):
     late = _create(db, tenant, prop, landlord, issue_date=date(2025, 1, 1), due_date=date(2025, 1, 10))
     on_time = _create(db, tenant, prop, landlord, issue_date=date(2025, 1, 1), due_date=date(2025, 3, 10))
     draft = _create(db, tenant, prop, landlord, issue_date=date(2025, 1, 1), due_date=date(2025, 1, 5))
     InvoiceService.send_invoice(db, late, actor(landlord))
     InvoiceService.send_invoice(db, on_time, actor(landlord))

     assert InvoiceService.mark_overdue_invoices(db, today=date(2025, 2, 1)) == 1
     assert late.status == "overdue"
     assert on_time.status == "sent"
     assert draft.status == "draft"


def test_tenant_summary(db, tenant, prop, landlord):
     invoice = _create(db, tenant, prop, landlord, tax_amount=Decimal("0"),
                       items=[{"description": "Rent", "quantity": 1, "unit_price": Decimal("1000")}])
     InvoiceService.send_invoice(db, invoice, actor(landlord))
     InvoiceService.mark_paid(db, invoice, actor(landlord), amount=Decimal("250"))
     db.commit()

     summary = InvoiceService.tenant_summary(db, tenant.id)
     assert summary["total_invoices"] == 1
     assert summary["sent"]["count"] == 1
     assert summary["outstanding"] == Decimal("750")
