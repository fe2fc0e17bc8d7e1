from sqlalchemy import Column, String, Date, DateTime, Integer, Boolean, Index
from sqlalchemy.dialects.postgresql import UUID
from .base import Base, now_utc


class Customer(Base):
    """Read model projected from the Customer event stream."""
    __tablename__ = 'customers'

    id = Column(UUID(as_uuid=True), primary_key=True)
    salutation = Column(String(10), nullable=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(254), nullable=False, unique=True)
    phone_number = Column(String(20), nullable=False)
    date_of_birth = Column(Date, nullable=False)
    street = Column(String(200), nullable=False)
    city = Column(String(100), nullable=False)
    postal_code = Column(String(20), nullable=False)
    country = Column(String(100), nullable=False, default='Germany')
    license_number = Column(String(20), nullable=False)
    license_issue_country = Column(String(100), nullable=False)
    license_issue_date = Column(Date, nullable=False)
    license_expiry_date = Column(Date, nullable=False)
    status = Column(String(20), nullable=False, default='Active')
    customer_type = Column(String(20), nullable=False, default='Individual')
    company_name = Column(String(200), nullable=True)
    vat_id = Column(String(11), nullable=True)
    payment_terms_days = Column(Integer, nullable=True)
    is_anonymized = Column(Boolean, nullable=False, default=False)
    registered_at = Column(DateTime(timezone=True), default=now_utc, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc, nullable=False)

    __table_args__ = (
        Index('idx_customers_last_name', 'last_name'),
        Index('idx_customers_status', 'status'),
        Index('idx_customers_city', 'city'),
        Index('idx_customers_license_expiry_date', 'license_expiry_date'),
    )
