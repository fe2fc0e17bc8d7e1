from sqlalchemy import Column, String, Date, DateTime, Integer, Numeric, Text, Index
from sqlalchemy.dialects.postgresql import UUID
from .base import Base, now_utc


class Reservation(Base):
    """Read model projected from the Reservation event stream."""
    __tablename__ = 'reservations'

    id = Column(UUID(as_uuid=True), primary_key=True)
    vehicle_id = Column(UUID(as_uuid=True), nullable=False)
    customer_id = Column(UUID(as_uuid=True), nullable=False)
    customer_name = Column(String(201), nullable=True)
    customer_email = Column(String(254), nullable=True)
    category_code = Column(String(20), nullable=False)
    pickup_date = Column(Date, nullable=False)
    return_date = Column(Date, nullable=False)
    rental_days = Column(Integer, nullable=False)
    pickup_location_code = Column(String(7), nullable=False)
    dropoff_location_code = Column(String(7), nullable=False)
    total_price_net = Column(Numeric(10, 2), nullable=False)
    total_price_vat = Column(Numeric(10, 2), nullable=False)
    total_price_gross = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(3), nullable=False, default='EUR')
    status = Column(String(20), nullable=False, default='Pending')
    cancellation_reason = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_utc, nullable=False)
    confirmed_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index('idx_reservations_vehicle_dates', 'vehicle_id', 'pickup_date', 'return_date'),
        Index('idx_reservations_customer_id', 'customer_id'),
        Index('idx_reservations_status', 'status'),
        Index('idx_reservations_pickup_location_code', 'pickup_location_code'),
    )
