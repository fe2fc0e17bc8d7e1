from sqlalchemy import Column, BigInteger, Integer, String, DateTime, Index, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB
from .base import Base, now_utc


class StoredEvent(Base):
    """Append-only event log; one row per event, ordered per stream."""
    __tablename__ = 'stored_events'

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    stream_name = Column(String(100), nullable=False)
    stream_version = Column(Integer, nullable=False)
    event_type = Column(String(100), nullable=False)
    payload = Column(JSONB, nullable=False)
    created_at = Column(DateTime(timezone=True), default=now_utc, nullable=False)

    __table_args__ = (
        UniqueConstraint('stream_name', 'stream_version', name='uq_stored_events_stream_version'),
        Index('idx_stored_events_stream_name', 'stream_name'),
        Index('idx_stored_events_event_type', 'event_type'),
    )
