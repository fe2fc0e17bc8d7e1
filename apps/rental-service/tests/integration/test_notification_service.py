from datetime import date, timedelta

import pytest

from rental.db import schemas
from rental.db.repositories import notifications as notification_repo
from rental.db.repositories import reservations as reservation_repo
from rental.services.customer_service import CustomerCommandService
from rental.services.notification_service import NotificationService
from rental.services.reservation_service import ReservationService
from rental.utils.feature_flags import refresh_feature_flag_cache


class _FakeEmailService:
    def __init__(self, result=None, error=None):
        self.result = result if result is not None else {"success": True, "message_id": "<abc@orange-rental.de>"}
        self.error = error
        self.sent = []

    def render_template(self, template_name, context):
        return f"<p>{template_name}: {context['total_price']}</p>", f"{template_name}: {context['total_price']}"

    async def send_email(self, to_email, subject, html_content, text_content=None, reply_to=None):
        if self.error is not None:
            raise self.error
        self.sent.append({"to": to_email, "subject": subject, "html": html_content})
        return self.result


@pytest.fixture
def email_enabled(monkeypatch):
    monkeypatch.setenv("FEATURE_EMAIL_NOTIFICATIONS_ENABLED", "true")
    refresh_feature_flag_cache()


@pytest.fixture
def reservation_row(db_session, customer_payload, location_factory, vehicle_factory, pricing_factory):
    location_factory()
    vehicle = vehicle_factory()
    pricing_factory()
    customer = CustomerCommandService(db_session).register(schemas.CustomerCreate(**customer_payload()))
    start = date.today() + timedelta(days=3)
    reservation = ReservationService(db_session).create_reservation(schemas.ReservationCreate(
        customer_id=customer.id,
        vehicle_id=vehicle.id,
        category_code="KOMPAKT",
        pickup_date=start,
        return_date=start + timedelta(days=1),
        pickup_location_code="BER-HBF",
        dropoff_location_code="BER-HBF",
    ))
    return reservation_repo.get_reservation(db_session, reservation.id)


def test_disabled_notifications_are_logged_as_skipped(db_session, reservation_row):
    fake = _FakeEmailService()
    log = NotificationService(db_session, email_service=fake).notify_reservation_confirmed(reservation_row)
    assert log.status == notification_repo.STATUS_SKIPPED
    assert log.email_address == "max.mustermann@example.de"
    assert fake.sent == []


def test_confirmation_email_is_sent_and_logged(db_session, reservation_row, email_enabled):
    fake = _FakeEmailService()
    log = NotificationService(db_session, email_service=fake).notify_reservation_confirmed(reservation_row)
    assert log.status == notification_repo.STATUS_SENT
    assert log.provider_message_id == "<abc@orange-rental.de>"
    assert log.sent_at is not None
    assert len(fake.sent) == 1
    assert "EUR" in fake.sent[0]["html"]
    assert "Reservation confirmed" in fake.sent[0]["subject"]


def test_failed_delivery_is_recorded(db_session, reservation_row, email_enabled):
    fake = _FakeEmailService(result={"success": False, "error": "mailbox full"})
    log = NotificationService(db_session, email_service=fake).notify_reservation_cancelled(reservation_row)
    assert log.status == notification_repo.STATUS_FAILED
    assert log.error_message == "mailbox full"


def test_exception_while_sending_is_recorded(db_session, reservation_row, email_enabled):
    fake = _FakeEmailService(error=OSError("smtp down"))
    service = NotificationService(db_session, email_service=fake)
    log = service.notify_reservation_cancelled(reservation_row)
    assert log.status == notification_repo.STATUS_FAILED
    assert "smtp down" in log.error_message


def test_reservation_without_email_is_not_notified(db_session, reservation_row):
    reservation_row.customer_email = None
    assert NotificationService(db_session, email_service=_FakeEmailService()).notify_reservation_confirmed(reservation_row) is None


def test_confirm_through_service_sends_email(db_session, reservation_row, email_enabled):
    fake = _FakeEmailService()
    service = ReservationService(db_session, notification_service=NotificationService(db_session, email_service=fake))
    service.confirm(reservation_row.id)
    logs = notification_repo.get_email_logs_for_reservation(db_session, reservation_row.id)
    assert [log.status for log in logs] == [notification_repo.STATUS_SENT]
    assert fake.sent[0]["to"] == "max.mustermann@example.de"
