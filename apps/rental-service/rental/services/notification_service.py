"""
Notification service: reservation emails and their delivery log.

Every attempt is recorded in `email_notification_logs`. Delivery problems
are logged and stored on the log row; they never fail the reservation
operation that triggered them.
"""

import asyncio
import logging
from inspect import isawaitable, iscoroutinefunction
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from rental.db import models
from rental.db.repositories import notifications as notification_repo
from rental.domain.fleet import VehicleCategory
from rental.domain.shared import Currency, Money
from rental.utils.feature_flags import email_notifications_enabled

logger = logging.getLogger(__name__)

EVENT_RESERVATION_CONFIRMED = 'reservation_confirmed'
EVENT_RESERVATION_CANCELLED = 'reservation_cancelled'

TEMPLATE_RESERVATION_CONFIRMED = 'reservation_confirmed'
TEMPLATE_RESERVATION_CANCELLED = 'reservation_cancelled'


class NotificationService:
    """Renders and sends reservation emails, recording each attempt."""

    def __init__(self, db: Session, email_service: Optional[Any] = None):
        self.db = db
        if email_service is not None:
            self.email_service = email_service
        else:
            from rental.services import email_service as email_module
            self.email_service = email_module.get_email_service()

    def notify_reservation_confirmed(self, reservation: models.Reservation) -> Optional[models.EmailNotificationLog]:
        return self._notify(
            reservation,
            event_type=EVENT_RESERVATION_CONFIRMED,
            template_name=TEMPLATE_RESERVATION_CONFIRMED,
            subject=f"Ihre Reservierung ist bestätigt / Reservation confirmed ({_short_id(reservation)})",
        )

    def notify_reservation_cancelled(self, reservation: models.Reservation) -> Optional[models.EmailNotificationLog]:
        return self._notify(
            reservation,
            event_type=EVENT_RESERVATION_CANCELLED,
            template_name=TEMPLATE_RESERVATION_CANCELLED,
            subject=f"Ihre Reservierung wurde storniert / Reservation cancelled ({_short_id(reservation)})",
        )

    def _notify(
        self,
        reservation: models.Reservation,
        *,
        event_type: str,
        template_name: str,
        subject: str,
    ) -> Optional[models.EmailNotificationLog]:
        if not reservation.customer_email:
            logger.info("No email address on reservation %s; skipping %s", reservation.id, event_type)
            return None

        enabled = email_notifications_enabled()
        email_log = notification_repo.create_email_log(
            self.db,
            email_address=reservation.customer_email,
            event_type=event_type,
            template_name=template_name,
            subject=subject,
            reservation_id=reservation.id,
            customer_id=reservation.customer_id,
            status=notification_repo.STATUS_PENDING if enabled else notification_repo.STATUS_SKIPPED,
            metadata={'status': reservation.status},
        )
        if not enabled:
            logger.debug("Email notifications disabled; %s for %s recorded as skipped", event_type, reservation.id)
            return email_log

        self.send_email_notification(email_log, template_name, self._template_context(reservation))
        self.db.refresh(email_log)
        return email_log

    def send_email_notification(
        self,
        email_log: models.EmailNotificationLog,
        template_name: str,
        template_context: Dict[str, Any],
    ) -> Dict[str, Any]:
        """Render, send and record the outcome on `email_log`."""
        try:
            html_content, text_content = self.email_service.render_template(template_name, template_context)
            result = self._call_send(
                to_email=email_log.email_address,
                subject=email_log.subject,
                html_content=html_content,
                text_content=text_content,
            )
        except Exception as e:
            logger.error("Failed to send %s email to %s: %s", email_log.event_type, email_log.email_address, e, exc_info=True)
            result = {'success': False, 'error': f"Failed to send email: {e}"}

        if result.get('success'):
            notification_repo.update_email_status(
                self.db, email_log.id, notification_repo.STATUS_SENT,
                provider_message_id=result.get('message_id'),
            )
        else:
            notification_repo.update_email_status(
                self.db, email_log.id, notification_repo.STATUS_FAILED,
                error_message=result.get('error', 'Unknown error'),
            )
        return {'success': bool(result.get('success')), 'email_log_id': email_log.id, 'error': result.get('error')}

    def _call_send(self, **kwargs) -> Dict[str, Any]:
        send_fn = getattr(self.email_service, 'send_email')
        if iscoroutinefunction(send_fn):
            return asyncio.run(send_fn(**kwargs))
        result = send_fn(**kwargs)
        if isawaitable(result):
            result = asyncio.run(result)
        return result

    @staticmethod
    def _template_context(reservation: models.Reservation) -> Dict[str, Any]:
        total = Money(reservation.total_price_net, reservation.total_price_vat, Currency(reservation.currency))
        try:
            category_name = VehicleCategory(reservation.category_code).display_name
        except ValueError:
            category_name = reservation.category_code
        return {
            'customer_name': reservation.customer_name or '',
            'reservation_id': str(reservation.id),
            'category_name': category_name,
            'pickup_date': reservation.pickup_date.strftime('%d.%m.%Y'),
            'return_date': reservation.return_date.strftime('%d.%m.%Y'),
            'rental_days': reservation.rental_days,
            'pickup_location_code': reservation.pickup_location_code,
            'dropoff_location_code': reservation.dropoff_location_code,
            'total_price': total.to_german_string(),
            'cancellation_reason': reservation.cancellation_reason,
        }


def _short_id(reservation: models.Reservation) -> str:
    return str(reservation.id)[:8].upper()
