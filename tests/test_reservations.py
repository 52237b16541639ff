from decimal import Decimal

import pytest
from sqlalchemy.exc import OperationalError

from models import db
from models.booking import WorkshopBooking
from services.errors import GatewayError, NotFound, SlotExhausted, StorageError, ValidationError
from services.reservations import ReservationRequest, create_reservation
from conftest import SLOT_DATE, SLOT_TIME


def _payload(workshop_id, **overrides):
    data = {
        "workshop_id": workshop_id,
        "booking_date": SLOT_DATE.isoformat(),
        "time_slot": SLOT_TIME,
        "guests": 2,
        "total_amount": 3000,
        "customer_name": "Asha Patel",
        "customer_email": "Asha@Example.com",
        "customer_phone": "+91 98765 43210",
    }
    data.update(overrides)
    return data


class TestReservationRequest:
    def test_parses_valid_payload(self):
        req = ReservationRequest.from_payload(_payload(7))
        assert req.workshop_id == 7
        assert req.booking_date == SLOT_DATE
        assert req.guests == 2
        assert req.total_amount == Decimal("3000.00")
        assert req.customer_email == "asha@example.com"

    @pytest.mark.parametrize("field", [
        "workshop_id", "booking_date", "time_slot", "guests",
        "total_amount", "customer_name", "customer_email", "customer_phone",
    ])
    def test_missing_field_is_rejected(self, field):
        data = _payload(7)
        del data[field]
        with pytest.raises(ValidationError, match=field):
            ReservationRequest.from_payload(data)

    @pytest.mark.parametrize("guests", [0, -1, "2", 1.5, True])
    def test_bad_guest_count_is_rejected(self, guests):
        with pytest.raises(ValidationError):
            ReservationRequest.from_payload(_payload(7, guests=guests))

    @pytest.mark.parametrize("amount", [0, -10, "abc", "NaN"])
    def test_bad_amount_is_rejected(self, amount):
        with pytest.raises(ValidationError):
            ReservationRequest.from_payload(_payload(7, total_amount=amount))

    @pytest.mark.parametrize("body", [[1, 2], "workshop", 42])
    def test_non_object_body_is_rejected(self, body):
        with pytest.raises(ValidationError, match="JSON object"):
            ReservationRequest.from_payload(body)

    def test_bad_date_is_rejected(self):
        with pytest.raises(ValidationError):
            ReservationRequest.from_payload(_payload(7, booking_date="20/01/2030"))

    def test_bad_email_is_rejected(self):
        with pytest.raises(ValidationError):
            ReservationRequest.from_payload(_payload(7, customer_email="not-an-email"))


class TestCreateReservation:
    def test_creates_pending_booking_after_gateway_order(self, app, gateway, make_user, make_workshop):
        user_id = make_user()
        workshop_id = make_workshop(max_spots=5)

        with app.app_context():
            result = create_reservation(user_id, ReservationRequest.from_payload(_payload(workshop_id)), gateway)

            assert result.order_id == "order_test_0001"
            assert result.currency == "INR"
            assert result.amount == Decimal("3000.00")
            assert result.workshop_title == "Wheel Throwing Basics"

            booking = db.session.get(WorkshopBooking, result.booking.id)
            assert booking.payment_status == "pending"
            assert booking.booking_status == "pending"
            assert booking.gateway_order_id == "order_test_0001"
            assert booking.gateway_payment_id is None
            assert booking.user_id == user_id

        metadata = gateway.orders[0]["metadata"]
        assert metadata["workshop_id"] == workshop_id
        assert metadata["time_slot"] == SLOT_TIME
        assert metadata["guests"] == 2
        assert metadata["user_id"] == user_id

    def test_intake_does_not_touch_the_ledger(self, app, gateway, make_user, make_workshop):
        user_id = make_user()
        workshop_id = make_workshop(max_spots=2)

        with app.app_context():
            create_reservation(user_id, ReservationRequest.from_payload(_payload(workshop_id)), gateway)
            create_reservation(user_id, ReservationRequest.from_payload(_payload(workshop_id)), gateway)
            assert WorkshopBooking.query.count() == 2

        from conftest import slot_state
        assert slot_state(app, workshop_id) == (0, 2)

    def test_unknown_workshop(self, app, gateway, make_user):
        user_id = make_user()
        with app.app_context():
            with pytest.raises(NotFound):
                create_reservation(user_id, ReservationRequest.from_payload(_payload(999)), gateway)
        assert gateway.orders == []

    def test_inactive_workshop(self, app, gateway, make_user, make_workshop):
        user_id = make_user()
        workshop_id = make_workshop(is_active=False)
        with app.app_context():
            with pytest.raises(NotFound):
                create_reservation(user_id, ReservationRequest.from_payload(_payload(workshop_id)), gateway)

    def test_unknown_time_slot(self, app, gateway, make_user, make_workshop):
        user_id = make_user()
        workshop_id = make_workshop()
        with app.app_context():
            with pytest.raises(ValidationError, match="Time slot not found"):
                create_reservation(
                    user_id, ReservationRequest.from_payload(_payload(workshop_id, time_slot="4:00 PM")), gateway
                )
        assert gateway.orders == []

    def test_guests_above_slot_capacity(self, app, gateway, make_user, make_workshop):
        user_id = make_user()
        workshop_id = make_workshop(max_spots=3)
        with app.app_context():
            with pytest.raises(ValidationError):
                create_reservation(user_id, ReservationRequest.from_payload(_payload(workshop_id, guests=4)), gateway)

    def test_advisory_check_rejects_full_slot_before_gateway(self, app, gateway, make_user, make_workshop):
        user_id = make_user()
        workshop_id = make_workshop(max_spots=4, booked=3)
        with app.app_context():
            with pytest.raises(SlotExhausted, match="Only 1 spots available"):
                create_reservation(user_id, ReservationRequest.from_payload(_payload(workshop_id, guests=2)), gateway)
            assert WorkshopBooking.query.count() == 0
        assert gateway.orders == []

    def test_gateway_failure_persists_nothing(self, app, gateway, make_user, make_workshop):
        user_id = make_user()
        workshop_id = make_workshop()
        gateway.fail = True

        with app.app_context():
            with pytest.raises(GatewayError):
                create_reservation(user_id, ReservationRequest.from_payload(_payload(workshop_id)), gateway)
            assert WorkshopBooking.query.count() == 0

    def test_storage_failure_logs_orphaned_order(self, app, gateway, make_user, make_workshop, monkeypatch, caplog):
        user_id = make_user()
        workshop_id = make_workshop()

        def failing_commit():
            raise OperationalError("INSERT INTO workshop_bookings", {}, Exception("disk I/O error"))

        with app.app_context():
            req = ReservationRequest.from_payload(_payload(workshop_id))
            monkeypatch.setattr(db.session, "commit", failing_commit)
            with pytest.raises(StorageError):
                create_reservation(user_id, req, gateway)
            monkeypatch.undo()

            assert WorkshopBooking.query.count() == 0

        assert len(gateway.orders) == 1
        assert "Orphaned gateway order order_test_0001" in caplog.text
