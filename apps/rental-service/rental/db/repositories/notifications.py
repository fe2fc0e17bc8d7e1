"""Email notification log persistence."""
from __future__ import annotations

import uuid
from datetime import datetime, UTC
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from rental.db import models

STATUS_PENDING = 'pending'
STATUS_SENT = 'sent'
STATUS_FAILED = 'failed'
STATUS_SKIPPED = 'skipped'


def create_email_log(
    db: Session,
    *,
    email_address: str,
    event_type: str,
    template_name: str,
    subject: str,
    reservation_id: Optional[uuid.UUID] = None,
    customer_id: Optional[uuid.UUID] = None,
    status: str = STATUS_PENDING,
    metadata: Optional[Dict[str, Any]] = None,
) -> models.EmailNotificationLog:
    email_log = models.EmailNotificationLog(
        reservation_id=reservation_id,
        customer_id=customer_id,
        email_address=email_address,
        event_type=event_type,
        template_name=template_name,
        subject=subject,
        status=status,
        metadata_json=metadata,
    )
    db.add(email_log)
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    db.refresh(email_log)
    return email_log


def update_email_status(
    db: Session,
    email_log_id: uuid.UUID,
    status: str,
    provider_message_id: Optional[str] = None,
    error_message: Optional[str] = None,
) -> bool:
    """Record the delivery outcome. Returns False when the log row is gone."""
    email_log = db.get(models.EmailNotificationLog, email_log_id)
    if email_log is None:
        return False
    email_log.status = status
    if provider_message_id:
        email_log.provider_message_id = provider_message_id
    if error_message:
        email_log.error_message = error_message
    if status == STATUS_SENT:
        email_log.sent_at = datetime.now(UTC)
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    return True


def get_email_logs_for_reservation(db: Session, reservation_id: uuid.UUID) -> List[models.EmailNotificationLog]:
    return (
        db.query(models.EmailNotificationLog)
        .filter(models.EmailNotificationLog.reservation_id == reservation_id)
        .order_by(models.EmailNotificationLog.created_at.asc())
        .all()
    )
