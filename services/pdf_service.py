# services/pdf_service.py
"""
PDF rendering for invoices, payment receipts and lease agreements.

Each generator returns the document as bytes so routes can stream it
and the email helpers can attach it.
"""
from io import BytesIO
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

import config
from utils.currency import format_currency
from utils.dates import format_date

_styles = getSampleStyleSheet()
TITLE_STYLE = ParagraphStyle(
     "DocTitle",
     parent=_styles["Title"],
     fontName="Helvetica-Bold",
     fontSize=20,
     leading=24,
     spaceAfter=12,
     alignment=1,
)
SECTION_STYLE = ParagraphStyle(
     "DocSection",
     parent=_styles["Heading4"],
     fontName="Helvetica-Bold",
     fontSize=12,
     leading=16,
     spaceBefore=10,
     spaceAfter=4,
)
BODY_STYLE = ParagraphStyle(
     "DocBody",
     parent=_styles["Normal"],
     fontName="Helvetica",
     fontSize=10,
     leading=14,
)

GRID_STYLE = TableStyle([
     ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
     ("FONTSIZE", (0, 0), (-1, -1), 10),
     ("LINEBELOW", (0, 0), (-1, 0), 0.75, colors.black),
     ("ALIGN", (1, 0), (-1, -1), "RIGHT"),
     ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
])
TOTALS_STYLE = TableStyle([
     ("ALIGN", (0, 0), (-1, -1), "RIGHT"),
     ("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold"),
     ("LINEABOVE", (0, 0), (-1, 0), 0.75, colors.black),
])


def _p(text, style=BODY_STYLE) -> Paragraph:
     return Paragraph(escape(str(text)), style)


def _render(story: list, title: str) -> bytes:
     buffer = BytesIO()
     doc = SimpleDocTemplate(
          buffer,
          pagesize=A4,
          leftMargin=50,
          rightMargin=50,
          topMargin=50,
          bottomMargin=50,
          title=title,
          author=config.COMPANY_NAME,
     )
     doc.build(story)
     return buffer.getvalue()


def generate_invoice_pdf(invoice) -> bytes:
     tenant = invoice.tenant
     prop = invoice.premises
     story = [
          _p("INVOICE", TITLE_STYLE),
          _p(f"Invoice #: {invoice.invoice_number}"),
          _p(f"Date: {format_date(invoice.issue_date)}"),
          Spacer(1, 10),
          _p(f"From: {config.COMPANY_NAME}"),
          _p(f"To: {tenant.name if tenant else ''}"),
     ]
     if prop is not None:
          story.append(_p(f"Property: {prop.address}"))
     story.append(Spacer(1, 14))

     rows = [["Description", "Qty", "Unit Price", "Amount"]]
     for item in invoice.items:
          rows.append([
               item.description,
               f"{item.quantity:g}",
               format_currency(item.unit_price),
               format_currency(item.amount),
          ])
     items_table = Table(rows, colWidths=[240, 50, 100, 100])
     items_table.setStyle(GRID_STYLE)
     story.append(items_table)
     story.append(Spacer(1, 10))

     totals = Table(
          [
               ["Subtotal:", format_currency(invoice.subtotal)],
               ["Tax:", format_currency(invoice.tax_amount)],
               ["Total:", format_currency(invoice.total_amount)],
          ],
          colWidths=[390, 100],
     )
     totals.setStyle(TOTALS_STYLE)
     story.append(totals)
     story.append(Spacer(1, 16))

     story.append(_p(f"Payment Status: {invoice.status.upper()}"))
     if invoice.outstanding_amount > 0:
          story.append(_p(f"Balance Due: {format_currency(invoice.outstanding_amount)}"))
          story.append(_p(f"Due Date: {format_date(invoice.due_date)}"))
     if invoice.payment_terms:
          story.append(_p(f"Payment Terms: {invoice.payment_terms}"))
     if invoice.notes:
          story.append(Spacer(1, 8))
          story.append(_p(invoice.notes))
     return _render(story, f"Invoice {invoice.invoice_number}")


def generate_receipt_pdf(payment) -> bytes:
     tenant = payment.tenant
     prop = payment.premises
     rows = [
          ["Receipt Number", payment.receipt_number],
          ["Payment Date", format_date(payment.payment_date)],
          ["Received From", tenant.name if tenant else ""],
          ["Property", prop.address if prop else ""],
          ["Payment Method", payment.payment_method.replace("_", " ").title()],
          ["Payment Type", payment.payment_type.title()],
          ["Reference", payment.reference_number or ""],
          ["Status", payment.status.upper()],
     ]
     if payment.invoice is not None:
          rows.append(["Invoice", payment.invoice.invoice_number])
     details = Table(rows, colWidths=[150, 340])
     details.setStyle(TableStyle([
          ("FONTNAME", (0, 0), (0, -1), "Helvetica-Bold"),
          ("FONTSIZE", (0, 0), (-1, -1), 10),
          ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
     ]))
     story = [
          _p("PAYMENT RECEIPT", TITLE_STYLE),
          _p(config.COMPANY_NAME),
          Spacer(1, 14),
          details,
          Spacer(1, 16),
          _p(f"Amount Paid: {format_currency(payment.amount)}", SECTION_STYLE),
     ]
     if payment.description:
          story.append(_p(payment.description))
     return _render(story, f"Receipt {payment.receipt_number}")


def generate_lease_pdf(lease) -> bytes:
     tenant = lease.tenant
     landlord = lease.landlord
     prop = lease.premises
     story = [
          _p("RESIDENTIAL LEASE AGREEMENT", TITLE_STYLE),
          _p(f"Prepared on {format_date(lease.created_at)}"),
          _p("1. Parties", SECTION_STYLE),
          _p(f"Landlord: {landlord.name if landlord else ''}"),
          _p(f"Tenant: {tenant.name if tenant else ''}"),
          _p("2. Property", SECTION_STYLE),
          _p(prop.address if prop else ""),
          _p("3. Term", SECTION_STYLE),
          _p(f"From {format_date(lease.start_date)} to {format_date(lease.end_date)}"),
          _p("4. Rent and Deposit", SECTION_STYLE),
          _p(f"Monthly rent: {format_currency(lease.monthly_rent)}, due on day {lease.payment_due_day} of each month."),
          _p(f"Security deposit: {format_currency(lease.security_deposit)}"),
          _p(f"First payment (deposit + first month): {format_currency(lease.first_payment_required)}"),
     ]

     terms = lease.terms or {}
     if terms:
          story.append(_p("5. Terms", SECTION_STYLE))
          for key, value in terms.items():
               label = key.replace("_", " ").capitalize()
               if isinstance(value, bool):
                    value = "Yes" if value else "No"
               elif isinstance(value, (list, tuple)):
                    value = ", ".join(str(v) for v in value)
               story.append(_p(f"{label}: {value}"))

     story.append(_p("Signatures", SECTION_STYLE))
     if lease.tenant_signed:
          story.append(_p(f"Tenant signed on {format_date(lease.tenant_signed_at)}"))
     else:
          story.append(_p("Tenant: not yet signed"))
     if lease.landlord_signed:
          story.append(_p(f"Landlord signed on {format_date(lease.landlord_signed_at)}"))
     else:
          story.append(_p("Landlord: not yet signed"))
     story.append(Spacer(1, 10))
     story.append(_p(f"Status: {lease.status.replace('_', ' ').upper()}"))
     return _render(story, f"Lease {lease.id}")
