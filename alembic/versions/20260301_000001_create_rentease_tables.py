"""Create RentEase tables

Revision ID: 20260301_000001
Revises: None
Create Date: 2026-03-01

This migration creates users, properties, property requests, leases,
invoices, payments, maintenance requests and notifications.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '20260301_000001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    ]


def _approval_columns():
    return [
        sa.Column('approval_status', sa.String(length=20), server_default='pending', nullable=False),
        sa.Column('approved_by', sa.Integer(), nullable=True),
        sa.Column('approved_at', sa.DateTime(), nullable=True),
        sa.Column('approval_notes', sa.Text(), nullable=True),
        sa.Column('rejection_reason', sa.Text(), nullable=True),
        sa.Column('approval_history', sa.JSON(), nullable=False),
    ]


def upgrade() -> None:
    """Create all RentEase tables."""
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('role', sa.String(length=50), server_default='tenant', nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column('current_property_id', sa.Integer(), nullable=True),
        sa.Column('current_lease_id', sa.Integer(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'properties',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('address', sa.String(length=255), nullable=False),
        sa.Column('property_type', sa.String(length=50), nullable=False),
        sa.Column('monthly_rent', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('bedrooms', sa.Integer(), nullable=True),
        sa.Column('bathrooms', sa.Integer(), nullable=True),
        sa.Column('landlord_id', sa.Integer(), nullable=False),
        sa.Column('is_available', sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('images', sa.JSON(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['landlord_id'], ['users.id'], name='fk_properties_landlord_id'),
    )
    op.create_index('ix_properties_landlord_id', 'properties', ['landlord_id'])
    op.create_index('ix_properties_is_available', 'properties', ['is_available'])

    op.create_table(
        'property_requests',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('tenant_id', sa.Integer(), nullable=False),
        sa.Column('request_type', sa.String(length=50), nullable=False),
        sa.Column('property_id', sa.Integer(), nullable=True),
        sa.Column('landlord_id', sa.Integer(), nullable=True),
        sa.Column('address', sa.String(length=255), nullable=True),
        sa.Column('estimated_rent', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('bedrooms', sa.Integer(), nullable=True),
        sa.Column('bathrooms', sa.Integer(), nullable=True),
        sa.Column('property_type', sa.String(length=50), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('landlord_email', sa.String(length=255), nullable=True),
        sa.Column('landlord_phone', sa.String(length=50), nullable=True),
        sa.Column('status', sa.String(length=50), server_default='pending', nullable=False),
        sa.Column('messages', sa.JSON(), nullable=False),
        sa.Column('response_message', sa.Text(), nullable=True),
        sa.Column('responded_at', sa.DateTime(), nullable=True),
        sa.Column('next_steps', sa.Text(), nullable=True),
        sa.Column('preferred_move_in', sa.Date(), nullable=True),
        sa.Column('lease_duration_months', sa.Integer(), server_default='12', nullable=False),
        sa.Column('additional_requests', sa.Text(), nullable=True),
        sa.Column('is_urgent', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['tenant_id'], ['users.id'], name='fk_property_requests_tenant_id'),
        sa.ForeignKeyConstraint(['landlord_id'], ['users.id'], name='fk_property_requests_landlord_id'),
        sa.ForeignKeyConstraint(['property_id'], ['properties.id'], name='fk_property_requests_property_id'),
    )
    op.create_index('ix_property_requests_tenant_id', 'property_requests', ['tenant_id'])
    op.create_index('ix_property_requests_landlord_id', 'property_requests', ['landlord_id'])
    op.create_index('ix_property_requests_property_id', 'property_requests', ['property_id'])
    op.create_index('ix_property_requests_request_type', 'property_requests', ['request_type'])
    op.create_index('ix_property_requests_status', 'property_requests', ['status'])

    op.create_table(
        'leases',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('property_id', sa.Integer(), nullable=False),
        sa.Column('tenant_id', sa.Integer(), nullable=False),
        sa.Column('landlord_id', sa.Integer(), nullable=False),
        sa.Column('property_request_id', sa.Integer(), nullable=True),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('monthly_rent', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('security_deposit', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('payment_due_day', sa.Integer(), server_default='1', nullable=False),
        sa.Column('status', sa.String(length=50), server_default='draft', nullable=False),
        sa.Column('tenant_signed', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('tenant_signed_at', sa.DateTime(), nullable=True),
        sa.Column('tenant_signature_data', sa.Text(), nullable=True),
        sa.Column('tenant_signature_ip', sa.String(length=64), nullable=True),
        sa.Column('landlord_signed', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('landlord_signed_at', sa.DateTime(), nullable=True),
        sa.Column('landlord_signature_data', sa.Text(), nullable=True),
        sa.Column('landlord_signature_ip', sa.String(length=64), nullable=True),
        sa.Column('next_payment_due', sa.Date(), nullable=True),
        sa.Column('last_payment_date', sa.Date(), nullable=True),
        sa.Column('total_paid', sa.Numeric(precision=12, scale=2), server_default='0', nullable=False),
        sa.Column('balance_due', sa.Numeric(precision=12, scale=2), server_default='0', nullable=False),
        sa.Column('first_payment_required', sa.Numeric(precision=12, scale=2), server_default='0', nullable=False),
        sa.Column('first_payment_made', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('first_payment_date', sa.Date(), nullable=True),
        sa.Column('document_url', sa.String(length=500), nullable=True),
        sa.Column('document_name', sa.String(length=255), nullable=True),
        sa.Column('document_uploaded_at', sa.DateTime(), nullable=True),
        sa.Column('terms', sa.JSON(), nullable=False),
        sa.Column('status_history', sa.JSON(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(
            ['property_id'],
            ['properties.id'],
            name='fk_leases_property_id',
            ondelete='CASCADE'
        ),
        sa.ForeignKeyConstraint(['tenant_id'], ['users.id'], name='fk_leases_tenant_id'),
        sa.ForeignKeyConstraint(['landlord_id'], ['users.id'], name='fk_leases_landlord_id'),
        sa.ForeignKeyConstraint(
            ['property_request_id'],
            ['property_requests.id'],
            name='fk_leases_property_request_id'
        ),
    )
    op.create_index('ix_leases_property_id', 'leases', ['property_id'])
    op.create_index('ix_leases_tenant_id', 'leases', ['tenant_id'])
    op.create_index('ix_leases_landlord_id', 'leases', ['landlord_id'])
    op.create_index('ix_leases_status', 'leases', ['status'])
    op.create_index('ix_leases_next_payment_due', 'leases', ['next_payment_due'])

    op.create_table(
        'invoices',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('invoice_number', sa.String(length=50), nullable=False),
        sa.Column('issue_date', sa.Date(), nullable=False),
        sa.Column('due_date', sa.Date(), nullable=False),
        sa.Column('tenant_id', sa.Integer(), nullable=False),
        sa.Column('property_id', sa.Integer(), nullable=False),
        sa.Column('lease_id', sa.Integer(), nullable=True),
        sa.Column('subtotal', sa.Numeric(precision=12, scale=2), server_default='0', nullable=False),
        sa.Column('tax_amount', sa.Numeric(precision=12, scale=2), server_default='0', nullable=False),
        sa.Column('total_amount', sa.Numeric(precision=12, scale=2), server_default='0', nullable=False),
        sa.Column('paid_amount', sa.Numeric(precision=12, scale=2), server_default='0', nullable=False),
        sa.Column('status', sa.String(length=20), server_default='draft', nullable=False),
        *_approval_columns(),
        sa.Column('created_by', sa.Integer(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('payment_terms', sa.String(length=255), nullable=True),
        sa.Column('sent_at', sa.DateTime(), nullable=True),
        sa.Column('reminders_sent', sa.Integer(), server_default='0', nullable=False),
        sa.Column('last_reminder_at', sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['tenant_id'], ['users.id'], name='fk_invoices_tenant_id'),
        sa.ForeignKeyConstraint(['property_id'], ['properties.id'], name='fk_invoices_property_id'),
        sa.ForeignKeyConstraint(
            ['lease_id'],
            ['leases.id'],
            name='fk_invoices_lease_id',
            ondelete='SET NULL'
        ),
        sa.ForeignKeyConstraint(['approved_by'], ['users.id'], name='fk_invoices_approved_by'),
        sa.ForeignKeyConstraint(['created_by'], ['users.id'], name='fk_invoices_created_by'),
    )
    op.create_index('ix_invoices_invoice_number', 'invoices', ['invoice_number'], unique=True)
    op.create_index('ix_invoices_tenant_id', 'invoices', ['tenant_id'])
    op.create_index('ix_invoices_property_id', 'invoices', ['property_id'])
    op.create_index('ix_invoices_lease_id', 'invoices', ['lease_id'])
    op.create_index('ix_invoices_due_date', 'invoices', ['due_date'])
    op.create_index('ix_invoices_status', 'invoices', ['status'])
    op.create_index('ix_invoices_approval_status', 'invoices', ['approval_status'])

    op.create_table(
        'invoice_items',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('invoice_id', sa.Integer(), nullable=False),
        sa.Column('description', sa.String(length=255), nullable=False),
        sa.Column('quantity', sa.Numeric(precision=10, scale=2), server_default='1', nullable=False),
        sa.Column('unit_price', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('amount', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('period_start', sa.Date(), nullable=True),
        sa.Column('period_end', sa.Date(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(
            ['invoice_id'],
            ['invoices.id'],
            name='fk_invoice_items_invoice_id',
            ondelete='CASCADE'
        ),
    )
    op.create_index('ix_invoice_items_invoice_id', 'invoice_items', ['invoice_id'])

    op.create_table(
        'payments',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('receipt_number', sa.String(length=50), nullable=False),
        sa.Column('amount', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('payment_date', sa.Date(), nullable=False),
        sa.Column('payment_method', sa.String(length=30), server_default='cash', nullable=False),
        sa.Column('payment_type', sa.String(length=30), server_default='rent', nullable=False),
        sa.Column('tenant_id', sa.Integer(), nullable=False),
        sa.Column('property_id', sa.Integer(), nullable=True),
        sa.Column('lease_id', sa.Integer(), nullable=True),
        sa.Column('invoice_id', sa.Integer(), nullable=True),
        sa.Column('status', sa.String(length=20), server_default='pending', nullable=False),
        *_approval_columns(),
        sa.Column('recorded_by', sa.Integer(), nullable=True),
        sa.Column('description', sa.String(length=255), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('reference_number', sa.String(length=100), nullable=True),
        sa.Column('late_fee', sa.Numeric(precision=12, scale=2), server_default='0', nullable=False),
        sa.Column('due_date', sa.Date(), nullable=True),
        sa.Column('cancelled_by', sa.Integer(), nullable=True),
        sa.Column('cancelled_at', sa.DateTime(), nullable=True),
        sa.Column('cancellation_reason', sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['tenant_id'], ['users.id'], name='fk_payments_tenant_id'),
        sa.ForeignKeyConstraint(['property_id'], ['properties.id'], name='fk_payments_property_id'),
        sa.ForeignKeyConstraint(
            ['lease_id'],
            ['leases.id'],
            name='fk_payments_lease_id',
            ondelete='SET NULL'
        ),
        sa.ForeignKeyConstraint(
            ['invoice_id'],
            ['invoices.id'],
            name='fk_payments_invoice_id',
            ondelete='SET NULL'
        ),
        sa.ForeignKeyConstraint(['approved_by'], ['users.id'], name='fk_payments_approved_by'),
        sa.ForeignKeyConstraint(['recorded_by'], ['users.id'], name='fk_payments_recorded_by'),
        sa.ForeignKeyConstraint(['cancelled_by'], ['users.id'], name='fk_payments_cancelled_by'),
    )
    op.create_index('ix_payments_receipt_number', 'payments', ['receipt_number'], unique=True)
    op.create_index('ix_payments_payment_date', 'payments', ['payment_date'])
    op.create_index('ix_payments_tenant_id', 'payments', ['tenant_id'])
    op.create_index('ix_payments_property_id', 'payments', ['property_id'])
    op.create_index('ix_payments_lease_id', 'payments', ['lease_id'])
    op.create_index('ix_payments_invoice_id', 'payments', ['invoice_id'])
    op.create_index('ix_payments_status', 'payments', ['status'])

    op.create_table(
        'maintenance_requests',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('property_id', sa.Integer(), nullable=False),
        sa.Column('tenant_id', sa.Integer(), nullable=True),
        sa.Column('landlord_id', sa.Integer(), nullable=True),
        sa.Column('title', sa.String(length=100), nullable=False),
        sa.Column('description', sa.String(length=1000), nullable=False),
        sa.Column('priority', sa.String(length=20), server_default='Medium', nullable=False),
        sa.Column('status', sa.String(length=20), server_default='Pending', nullable=False),
        sa.Column('category', sa.String(length=50), server_default='Other', nullable=False),
        sa.Column('urgency', sa.String(length=20), server_default='Normal', nullable=False),
        sa.Column('date_reported', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('date_started', sa.DateTime(), nullable=True),
        sa.Column('date_completed', sa.DateTime(), nullable=True),
        sa.Column('due_date', sa.Date(), nullable=True),
        sa.Column('images', sa.JSON(), nullable=False),
        sa.Column('estimated_cost', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('actual_cost', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('is_emergency', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('created_by', sa.Integer(), nullable=False),
        sa.Column('updated_by', sa.Integer(), nullable=True),
        sa.Column('satisfaction_rating', sa.Integer(), nullable=True),
        sa.Column('feedback', sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(
            ['property_id'],
            ['properties.id'],
            name='fk_maintenance_requests_property_id',
            ondelete='CASCADE'
        ),
        sa.ForeignKeyConstraint(['tenant_id'], ['users.id'], name='fk_maintenance_requests_tenant_id'),
        sa.ForeignKeyConstraint(['landlord_id'], ['users.id'], name='fk_maintenance_requests_landlord_id'),
        sa.ForeignKeyConstraint(['created_by'], ['users.id'], name='fk_maintenance_requests_created_by'),
        sa.ForeignKeyConstraint(['updated_by'], ['users.id'], name='fk_maintenance_requests_updated_by'),
    )
    op.create_index('ix_maintenance_requests_property_id', 'maintenance_requests', ['property_id'])
    op.create_index('ix_maintenance_requests_tenant_id', 'maintenance_requests', ['tenant_id'])
    op.create_index('ix_maintenance_requests_landlord_id', 'maintenance_requests', ['landlord_id'])
    op.create_index('ix_maintenance_requests_priority', 'maintenance_requests', ['priority'])
    op.create_index('ix_maintenance_requests_status', 'maintenance_requests', ['status'])

    op.create_table(
        'maintenance_notes',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('request_id', sa.Integer(), nullable=False),
        sa.Column('author_id', sa.Integer(), nullable=False),
        sa.Column('content', sa.String(length=500), nullable=False),
        sa.Column('is_internal', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(
            ['request_id'],
            ['maintenance_requests.id'],
            name='fk_maintenance_notes_request_id',
            ondelete='CASCADE'
        ),
        sa.ForeignKeyConstraint(['author_id'], ['users.id'], name='fk_maintenance_notes_author_id'),
    )
    op.create_index('ix_maintenance_notes_request_id', 'maintenance_notes', ['request_id'])

    op.create_table(
        'notifications',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('recipient_id', sa.Integer(), nullable=False),
        sa.Column('sender_id', sa.Integer(), nullable=True),
        sa.Column('type', sa.String(length=50), nullable=False),
        sa.Column('title', sa.String(length=200), server_default='Notification', nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('related_document_id', sa.Integer(), nullable=True),
        sa.Column('related_document_model', sa.String(length=50), nullable=True),
        sa.Column('related_property_id', sa.Integer(), nullable=True),
        sa.Column('related_property_request_id', sa.Integer(), nullable=True),
        sa.Column('related_lease_id', sa.Integer(), nullable=True),
        sa.Column('action_required', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('action_url', sa.String(length=500), nullable=True),
        sa.Column('is_read', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('read_at', sa.DateTime(), nullable=True),
        sa.Column('priority', sa.String(length=20), server_default='medium', nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(
            ['recipient_id'],
            ['users.id'],
            name='fk_notifications_recipient_id',
            ondelete='CASCADE'
        ),
        sa.ForeignKeyConstraint(['sender_id'], ['users.id'], name='fk_notifications_sender_id'),
        sa.ForeignKeyConstraint(
            ['related_property_id'],
            ['properties.id'],
            name='fk_notifications_related_property_id',
            ondelete='SET NULL'
        ),
        sa.ForeignKeyConstraint(
            ['related_property_request_id'],
            ['property_requests.id'],
            name='fk_notifications_related_property_request_id',
            ondelete='SET NULL'
        ),
        sa.ForeignKeyConstraint(
            ['related_lease_id'],
            ['leases.id'],
            name='fk_notifications_related_lease_id',
            ondelete='SET NULL'
        ),
    )
    op.create_index('ix_notifications_recipient_id', 'notifications', ['recipient_id'])
    op.create_index('ix_notifications_type', 'notifications', ['type'])
    op.create_index('ix_notifications_is_read', 'notifications', ['is_read'])
    op.create_index('ix_notifications_created_at', 'notifications', ['created_at'])


def downgrade() -> None:
    """Drop all RentEase tables in reverse dependency order."""
    op.drop_table('notifications')
    op.drop_table('maintenance_notes')
    op.drop_table('maintenance_requests')
    op.drop_table('payments')
    op.drop_table('invoice_items')
    op.drop_table('invoices')
    op.drop_table('leases')
    op.drop_table('property_requests')
    op.drop_table('properties')
    op.drop_table('users')
