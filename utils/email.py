# utils/email.py
import base64
import logging
from html import escape
from typing import Optional

import requests

import config
from errors import ExternalServiceError
from utils.currency import format_currency
from utils.dates import format_date

logger = logging.getLogger(__name__)

BREVO_URL = "https://api.brevo.com/v3/smtp/email"


def is_email_configured() -> bool:
     return bool(config.BREVO_API_KEY)


def send_email(to_email: str, subject: str, html: str, to_name: Optional[str] = None,
               text: Optional[str] = None, attachments: Optional[list] = None) -> None:
     """
     Send a transactional email through Brevo.

     attachments is a list of (filename, bytes) pairs.
     """
     if not config.BREVO_API_KEY:
          raise ExternalServiceError("BREVO_API_KEY is not set")

     recipient = {"email": to_email}
     if to_name:
          recipient["name"] = to_name
     payload = {
          "sender": {"name": config.EMAIL_SENDER_NAME, "email": config.EMAIL_SENDER_ADDRESS},
          "to": [recipient],
          "subject": subject,
          "htmlContent": html,
     }
     if text:
          payload["textContent"] = text
     if attachments:
          payload["attachment"] = [
               {"name": name, "content": base64.b64encode(content).decode("ascii")}
               for name, content in attachments
          ]

     try:
          response = requests.post(
               BREVO_URL,
               headers={
                    "api-key": config.BREVO_API_KEY,
                    "Content-Type": "application/json",
               },
               json=payload,
               timeout=10,
          )
     except requests.RequestException as exc:
          logger.error("Brevo request failed for %s: %s", to_email, exc)
          raise ExternalServiceError("Email delivery failed") from exc
     if response.status_code not in (200, 201):
          logger.error("Brevo error %s: %s", response.status_code, response.text)
          raise ExternalServiceError(f"Brevo error: {response.text}")
     logger.info("Email '%s' sent to %s", subject, to_email)


def send_invoice_email(invoice, pdf_bytes: Optional[bytes] = None) -> None:
     tenant = invoice.tenant
     amount = format_currency(invoice.total_amount)
     due = format_date(invoice.due_date)
     html = f"""
          <h2>Invoice {invoice.invoice_number}</h2>
          <p>Dear {escape(tenant.name)},</p>
          <p>A new invoice of <strong>{amount}</strong> has been issued to you.</p>
          <p>Payment is due by <strong>{due}</strong>.</p>
          <p><a href="{config.APP_URL}/invoices/{invoice.id}">View invoice</a></p>
          <p>Regards,<br>{config.COMPANY_NAME}</p>
     """
     attachments = [(f"Invoice_{invoice.invoice_number}.pdf", pdf_bytes)] if pdf_bytes else None
     send_email(
          tenant.email,
          f"Invoice {invoice.invoice_number} - {amount} due {due}",
          html,
          to_name=tenant.name,
          attachments=attachments,
     )


def send_receipt_email(payment, pdf_bytes: Optional[bytes] = None) -> None:
     tenant = payment.tenant
     amount = format_currency(payment.amount)
     html = f"""
          <h2>Payment received</h2>
          <p>Dear {escape(tenant.name)},</p>
          <p>We have received your payment of <strong>{amount}</strong>
          on {format_date(payment.payment_date)}.</p>
          <p>Receipt number: <strong>{payment.receipt_number}</strong></p>
          <p>Regards,<br>{config.COMPANY_NAME}</p>
     """
     attachments = [(f"Receipt_{payment.receipt_number}.pdf", pdf_bytes)] if pdf_bytes else None
     send_email(tenant.email, f"Payment receipt {payment.receipt_number}", html,
                to_name=tenant.name, attachments=attachments)


def send_request_approved_email(request, landlord_name: str, property_address: str) -> None:
     tenant = request.tenant
     link = f"{config.APP_URL}/property-requests/{request.id}"
     next_steps = f"<h3>Next Steps:</h3><p>{escape(request.next_steps)}</p>" if request.next_steps else ""
     html = f"""
          <h2>Property Request Approved!</h2>
          <p>Dear {escape(tenant.name)},</p>
          <p>Great news! Your property request has been <strong>approved</strong> by {escape(landlord_name)}.</p>
          <p><strong>Address:</strong> {escape(property_address)}</p>
          <h3>Landlord's Message:</h3>
          <p>"{escape(request.response_message or '')}"</p>
          {next_steps}
          <p><a href="{link}">View Request Details</a></p>
          <p>Best regards,<br>{config.COMPANY_NAME} Team</p>
     """
     text = (
          f"Dear {tenant.name},\n\n"
          f"Your property request has been approved by {landlord_name}.\n\n"
          f"Property: {property_address}\n"
          f"Landlord's message: \"{request.response_message or ''}\"\n"
          + (f"\nNext steps: {request.next_steps}\n" if request.next_steps else "")
          + f"\nView full details: {link}"
     )
     send_email(tenant.email, f"Property Request Approved - {property_address}", html,
                to_name=tenant.name, text=text)
