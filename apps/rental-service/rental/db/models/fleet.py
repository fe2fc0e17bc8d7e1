import uuid
from sqlalchemy import Column, String, Integer, Numeric, DateTime, ForeignKey, Index
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from .base import Base, now_utc


class Location(Base):
    __tablename__ = 'locations'

    code = Column(String(7), primary_key=True)
    name = Column(String(100), nullable=False)
    street = Column(String(200), nullable=False)
    city = Column(String(100), nullable=False)
    postal_code = Column(String(5), nullable=False)
    status = Column(String(20), nullable=False, default='Active')
    created_at = Column(DateTime(timezone=True), default=now_utc, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc, nullable=False)

    vehicles = relationship("Vehicle", back_populates="location")


class Vehicle(Base):
    __tablename__ = 'vehicles'

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(100), nullable=False)
    category_code = Column(String(20), nullable=False)
    location_code = Column(String(7), ForeignKey('locations.code'), nullable=False)
    daily_rate_net = Column(Numeric(10, 2), nullable=False)
    daily_rate_vat = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(3), nullable=False, default='EUR')
    seats = Column(Integer, nullable=False)
    fuel_type = Column(String(20), nullable=False)
    transmission_type = Column(String(20), nullable=False)
    status = Column(String(20), nullable=False, default='Available')
    license_plate = Column(String(20), nullable=True, unique=True)
    manufacturer = Column(String(100), nullable=True)
    model = Column(String(100), nullable=True)
    year = Column(Integer, nullable=True)
    image_url = Column(String(500), nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_utc, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc, nullable=False)

    location = relationship("Location", back_populates="vehicles")

    __table_args__ = (
        Index('idx_vehicles_location_code', 'location_code'),
        Index('idx_vehicles_category_code', 'category_code'),
        Index('idx_vehicles_status', 'status'),
    )
