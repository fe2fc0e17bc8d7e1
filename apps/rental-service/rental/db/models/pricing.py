import uuid
from sqlalchemy import Column, String, Numeric, Boolean, DateTime, Index
from sqlalchemy.dialects.postgresql import UUID
from .base import Base, now_utc


class PricingPolicy(Base):
    __tablename__ = 'pricing_policies'

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    category_code = Column(String(20), nullable=False)
    location_code = Column(String(7), nullable=True)
    daily_rate_net = Column(Numeric(10, 2), nullable=False)
    daily_rate_vat = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(3), nullable=False, default='EUR')
    effective_from = Column(DateTime(timezone=True), default=now_utc, nullable=False)
    effective_until = Column(DateTime(timezone=True), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=now_utc, nullable=False)

    __table_args__ = (
        Index('idx_pricing_policies_category_location', 'category_code', 'location_code'),
        Index('idx_pricing_policies_is_active', 'is_active'),
    )
