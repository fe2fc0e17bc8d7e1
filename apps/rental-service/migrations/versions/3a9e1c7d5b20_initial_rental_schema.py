"""initial rental schema

Revision ID: 3a9e1c7d5b20
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '3a9e1c7d5b20'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'stored_events',
        sa.Column('id', sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column('stream_name', sa.String(length=100), nullable=False),
        sa.Column('stream_version', sa.Integer(), nullable=False),
        sa.Column('event_type', sa.String(length=100), nullable=False),
        sa.Column('payload', postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('stream_name', 'stream_version', name='uq_stored_events_stream_version'),
    )
    op.create_index('idx_stored_events_stream_name', 'stored_events', ['stream_name'], unique=False)
    op.create_index('idx_stored_events_event_type', 'stored_events', ['event_type'], unique=False)

    op.create_table(
        'customers',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('salutation', sa.String(length=10), nullable=True),
        sa.Column('first_name', sa.String(length=100), nullable=False),
        sa.Column('last_name', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=254), nullable=False),
        sa.Column('phone_number', sa.String(length=20), nullable=False),
        sa.Column('date_of_birth', sa.Date(), nullable=False),
        sa.Column('street', sa.String(length=200), nullable=False),
        sa.Column('city', sa.String(length=100), nullable=False),
        sa.Column('postal_code', sa.String(length=20), nullable=False),
        sa.Column('country', sa.String(length=100), nullable=False, server_default='Germany'),
        sa.Column('license_number', sa.String(length=20), nullable=False),
        sa.Column('license_issue_country', sa.String(length=100), nullable=False),
        sa.Column('license_issue_date', sa.Date(), nullable=False),
        sa.Column('license_expiry_date', sa.Date(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='Active'),
        sa.Column('customer_type', sa.String(length=20), nullable=False, server_default='Individual'),
        sa.Column('company_name', sa.String(length=200), nullable=True),
        sa.Column('vat_id', sa.String(length=11), nullable=True),
        sa.Column('payment_terms_days', sa.Integer(), nullable=True),
        sa.Column('is_anonymized', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        sa.Column('registered_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
    )
    op.create_index('idx_customers_last_name', 'customers', ['last_name'], unique=False)
    op.create_index('idx_customers_status', 'customers', ['status'], unique=False)
    op.create_index('idx_customers_city', 'customers', ['city'], unique=False)
    op.create_index('idx_customers_license_expiry_date', 'customers', ['license_expiry_date'], unique=False)

    op.create_table(
        'locations',
        sa.Column('code', sa.String(length=7), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('street', sa.String(length=200), nullable=False),
        sa.Column('city', sa.String(length=100), nullable=False),
        sa.Column('postal_code', sa.String(length=5), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='Active'),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('code'),
    )

    op.create_table(
        'vehicles',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('category_code', sa.String(length=20), nullable=False),
        sa.Column('location_code', sa.String(length=7), sa.ForeignKey('locations.code'), nullable=False),
        sa.Column('daily_rate_net', sa.Numeric(10, 2), nullable=False),
        sa.Column('daily_rate_vat', sa.Numeric(10, 2), nullable=False),
        sa.Column('currency', sa.String(length=3), nullable=False, server_default='EUR'),
        sa.Column('seats', sa.Integer(), nullable=False),
        sa.Column('fuel_type', sa.String(length=20), nullable=False),
        sa.Column('transmission_type', sa.String(length=20), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='Available'),
        sa.Column('license_plate', sa.String(length=20), nullable=True),
        sa.Column('manufacturer', sa.String(length=100), nullable=True),
        sa.Column('model', sa.String(length=100), nullable=True),
        sa.Column('year', sa.Integer(), nullable=True),
        sa.Column('image_url', sa.String(length=500), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('license_plate'),
    )
    op.create_index('idx_vehicles_location_code', 'vehicles', ['location_code'], unique=False)
    op.create_index('idx_vehicles_category_code', 'vehicles', ['category_code'], unique=False)
    op.create_index('idx_vehicles_status', 'vehicles', ['status'], unique=False)

    op.create_table(
        'pricing_policies',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('category_code', sa.String(length=20), nullable=False),
        sa.Column('location_code', sa.String(length=7), nullable=True),
        sa.Column('daily_rate_net', sa.Numeric(10, 2), nullable=False),
        sa.Column('daily_rate_vat', sa.Numeric(10, 2), nullable=False),
        sa.Column('currency', sa.String(length=3), nullable=False, server_default='EUR'),
        sa.Column('effective_from', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('effective_until', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.text('true')),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_pricing_policies_category_location', 'pricing_policies', ['category_code', 'location_code'], unique=False)
    op.create_index('idx_pricing_policies_is_active', 'pricing_policies', ['is_active'], unique=False)

    op.create_table(
        'reservations',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('vehicle_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('customer_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('customer_name', sa.String(length=201), nullable=True),
        sa.Column('customer_email', sa.String(length=254), nullable=True),
        sa.Column('category_code', sa.String(length=20), nullable=False),
        sa.Column('pickup_date', sa.Date(), nullable=False),
        sa.Column('return_date', sa.Date(), nullable=False),
        sa.Column('rental_days', sa.Integer(), nullable=False),
        sa.Column('pickup_location_code', sa.String(length=7), nullable=False),
        sa.Column('dropoff_location_code', sa.String(length=7), nullable=False),
        sa.Column('total_price_net', sa.Numeric(10, 2), nullable=False),
        sa.Column('total_price_vat', sa.Numeric(10, 2), nullable=False),
        sa.Column('total_price_gross', sa.Numeric(10, 2), nullable=False),
        sa.Column('currency', sa.String(length=3), nullable=False, server_default='EUR'),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='Pending'),
        sa.Column('cancellation_reason', sa.Text(), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('confirmed_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('cancelled_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('completed_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_reservations_vehicle_dates', 'reservations', ['vehicle_id', 'pickup_date', 'return_date'], unique=False)
    op.create_index('idx_reservations_customer_id', 'reservations', ['customer_id'], unique=False)
    op.create_index('idx_reservations_status', 'reservations', ['status'], unique=False)
    op.create_index('idx_reservations_pickup_location_code', 'reservations', ['pickup_location_code'], unique=False)

    op.create_table(
        'email_notification_logs',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('reservation_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('customer_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('email_address', sa.String(length=320), nullable=False),
        sa.Column('event_type', sa.String(length=50), nullable=False),
        sa.Column('template_name', sa.String(length=100), nullable=False),
        sa.Column('subject', sa.String(length=200), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='pending'),
        sa.Column('provider_message_id', sa.String(length=255), nullable=True),
        sa.Column('error_message', sa.Text(), nullable=True),
        sa.Column('metadata', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('sent_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_email_notification_logs_reservation_id', 'email_notification_logs', ['reservation_id'], unique=False)
    op.create_index('idx_email_notification_logs_status', 'email_notification_logs', ['status'], unique=False)
    op.create_index('idx_email_notification_logs_event_type', 'email_notification_logs', ['event_type'], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('idx_email_notification_logs_event_type', table_name='email_notification_logs')
    op.drop_index('idx_email_notification_logs_status', table_name='email_notification_logs')
    op.drop_index('idx_email_notification_logs_reservation_id', table_name='email_notification_logs')
    op.drop_table('email_notification_logs')
    op.drop_index('idx_reservations_pickup_location_code', table_name='reservations')
    op.drop_index('idx_reservations_status', table_name='reservations')
    op.drop_index('idx_reservations_customer_id', table_name='reservations')
    op.drop_index('idx_reservations_vehicle_dates', table_name='reservations')
    op.drop_table('reservations')
    op.drop_index('idx_pricing_policies_is_active', table_name='pricing_policies')
    op.drop_index('idx_pricing_policies_category_location', table_name='pricing_policies')
    op.drop_table('pricing_policies')
    op.drop_index('idx_vehicles_status', table_name='vehicles')
    op.drop_index('idx_vehicles_category_code', table_name='vehicles')
    op.drop_index('idx_vehicles_location_code', table_name='vehicles')
    op.drop_table('vehicles')
    op.drop_table('locations')
    op.drop_index('idx_customers_license_expiry_date', table_name='customers')
    op.drop_index('idx_customers_city', table_name='customers')
    op.drop_index('idx_customers_status', table_name='customers')
    op.drop_index('idx_customers_last_name', table_name='customers')
    op.drop_table('customers')
    op.drop_index('idx_stored_events_event_type', table_name='stored_events')
    op.drop_index('idx_stored_events_stream_name', table_name='stored_events')
    op.drop_table('stored_events')
