from models import db
from models.admin_notification import AdminNotification
from models.booking import WorkshopBooking
from services import side_effects
from services.confirmation import confirm_payment
from services.dispatch import dispatch_booking_confirmed
from conftest import sign, booking_state


def _confirmed_booking(app, make_user, make_workshop, make_pending_booking, **workshop_kwargs):
    user_id = make_user()
    workshop_id = make_workshop(**workshop_kwargs)
    booking_id, order_id = make_pending_booking(user_id, workshop_id, guests=2)
    with app.app_context():
        confirm_payment(
            user_id=user_id,
            booking_id=booking_id,
            gateway_order_id=order_id,
            gateway_payment_id="pay_001",
            gateway_signature=sign(order_id, "pay_001"),
        )
    return booking_id


def test_confirmation_creates_admin_notification(app, make_user, make_workshop, make_pending_booking):
    booking_id = _confirmed_booking(app, make_user, make_workshop, make_pending_booking)

    with app.app_context():
        n = AdminNotification.query.filter_by(booking_id=booking_id).one()
        assert n.type == "workshop_booking"
        assert n.title == "New Workshop Registration"
        assert '"Wheel Throwing Basics"' in n.message
        assert "(2 guests)" in n.message
        assert "Rs. 3000.00" in n.message
        assert n.is_read is False


def test_confirmation_email_is_sent_with_booking_details(app, make_user, make_workshop, make_pending_booking, monkeypatch):
    sent = []

    def fake_send(to_email, subject, body, html_body=None):
        sent.append({"to": to_email, "subject": subject, "body": body, "html": html_body})
        return True, None

    monkeypatch.setattr(side_effects, "send_email", fake_send)
    _confirmed_booking(app, make_user, make_workshop, make_pending_booking)

    assert len(sent) == 1
    msg = sent[0]
    assert msg["to"] == "customer@example.com"
    assert msg["subject"] == "Workshop Registration Confirmed - Wheel Throwing Basics"
    assert "Sunday, 20 January 2030" in msg["body"]
    assert "10:00 AM" in msg["body"]
    assert "Basho Studio, Surat" in msg["body"]
    assert "https://maps.example.com/basho" in msg["html"]
    assert "Rs. 3,000.00" in msg["body"]
    assert "2 people" in msg["body"]


def test_email_omits_missing_location_gracefully(app, make_user, make_workshop, make_pending_booking):
    user_id = make_user()
    workshop_id = make_workshop(location=None, maps_link=None)
    booking_id, _ = make_pending_booking(user_id, workshop_id)

    with app.app_context():
        booking = db.session.get(WorkshopBooking, booking_id)
        subject, body, html = side_effects.build_confirmation_email(booking)

    assert "Location" not in body
    assert "Location" not in html
    assert "Google Maps" not in html
    assert "1 person" in body


def test_email_failure_keeps_booking_confirmed(app, make_user, make_workshop, make_pending_booking, monkeypatch):
    def broken_send(*args, **kwargs):
        raise RuntimeError("SMTP server exploded")

    monkeypatch.setattr(side_effects, "send_email", broken_send)
    booking_id = _confirmed_booking(app, make_user, make_workshop, make_pending_booking)

    assert booking_state(app, booking_id) == ("paid", "confirmed")
    with app.app_context():
        # the notification half still ran
        assert AdminNotification.query.filter_by(booking_id=booking_id).count() == 1


def test_unconfigured_smtp_is_reported_not_raised(app, make_user, make_workshop, make_pending_booking):
    booking_id = _confirmed_booking(app, make_user, make_workshop, make_pending_booking)

    with app.app_context():
        result = side_effects.run_booking_side_effects(booking_id)

    assert result == {"notification": True, "email": False}


def test_side_effects_skip_unconfirmed_bookings(app, make_user, make_workshop, make_pending_booking):
    user_id = make_user()
    workshop_id = make_workshop()
    booking_id, _ = make_pending_booking(user_id, workshop_id)

    with app.app_context():
        assert side_effects.run_booking_side_effects(booking_id) == {"notification": False, "email": False}
        assert AdminNotification.query.count() == 0


def test_queue_failure_is_swallowed(app, monkeypatch, caplog):
    class BrokenTask:
        def delay(self, *args, **kwargs):
            raise ConnectionError("broker unreachable")

    monkeypatch.setattr("services.dispatch.booking_confirmed_task", BrokenTask())

    with app.app_context():
        assert dispatch_booking_confirmed(42) is False

    assert "Could not queue side effects for booking 42" in caplog.text
