import uuid
from sqlalchemy import Column, String, Text, DateTime, Index
from sqlalchemy.dialects.postgresql import UUID, JSONB
from .base import Base, now_utc


class EmailNotificationLog(Base):
    __tablename__ = 'email_notification_logs'

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    reservation_id = Column(UUID(as_uuid=True), nullable=True)
    customer_id = Column(UUID(as_uuid=True), nullable=True)
    email_address = Column(String(320), nullable=False)
    event_type = Column(String(50), nullable=False)
    template_name = Column(String(100), nullable=False)
    subject = Column(String(200), nullable=False)
    status = Column(String(20), nullable=False, default='pending')
    provider_message_id = Column(String(255), nullable=True)
    error_message = Column(Text, nullable=True)
    metadata_json = Column('metadata', JSONB, nullable=True)
    sent_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_utc, nullable=False)

    __table_args__ = (
        Index('idx_email_notification_logs_reservation_id', 'reservation_id'),
        Index('idx_email_notification_logs_status', 'status'),
        Index('idx_email_notification_logs_event_type', 'event_type'),
    )
