import hashlib
import hmac
from datetime import date
from decimal import Decimal

import pytest

from app import create_app
from config import Config
from models import db
from models.booking import WorkshopBooking
from models.slot import WorkshopSlot
from models.user import User, Role
from models.workshop import Workshop
from security.password import hash_password
from services.errors import GatewayError
from services.gateway import RazorpayGateway
from utils.seed import seed_roles

GATEWAY_KEY_ID = "rzp_test_key"
GATEWAY_SECRET = "test_gateway_secret"
PASSWORD = "correct-horse-battery"
PASSWORD_HASH = hash_password(PASSWORD)

SLOT_DATE = date(2030, 1, 20)
SLOT_TIME = "10:00 AM"


class FakeGateway(RazorpayGateway):
    """Real razorpay client for signature checks; order creation is recorded instead of sent."""

    def __init__(self):
        super().__init__(GATEWAY_KEY_ID, GATEWAY_SECRET)
        self.orders = []
        self.fail = False

    def create_order(self, amount, currency, metadata):
        if self.fail:
            raise GatewayError("Failed to create payment order")
        order_id = f"order_test_{len(self.orders) + 1:04d}"
        self.orders.append({"id": order_id, "amount": amount, "currency": currency, "metadata": dict(metadata)})
        return order_id


def sign(order_id: str, payment_id: str, secret: str = GATEWAY_SECRET) -> str:
    """What checkout.js hands back after a successful payment."""
    body = f"{order_id}|{payment_id}".encode("utf-8")
    return hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()


@pytest.fixture
def app(tmp_path):
    db_path = tmp_path / "test.db"

    class TestConfig(Config):
        TESTING = True
        SQLALCHEMY_DATABASE_URI = "sqlite:///" + str(db_path)
        # concurrent writers wait on the sqlite lock instead of failing fast
        SQLALCHEMY_ENGINE_OPTIONS = {"connect_args": {"timeout": 30}}
        SEED_ROLES_ON_STARTUP = False
        RAZORPAY_KEY_ID = GATEWAY_KEY_ID
        RAZORPAY_KEY_SECRET = GATEWAY_SECRET
        SMTP_HOST = None
        STUDIO_NAME = "Test Pottery Studio"
        CELERY = {
            "broker_url": "memory://",
            "task_ignore_result": True,
            "task_always_eager": True,
            "task_eager_propagates": False,
        }

    flask_app = create_app(TestConfig)
    flask_app.extensions["payment_gateway"] = FakeGateway()

    with flask_app.app_context():
        db.create_all()
        seed_roles()

    yield flask_app

    with flask_app.app_context():
        db.session.remove()
        db.drop_all()
        db.engine.dispose()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def gateway(app):
    return app.extensions["payment_gateway"]


@pytest.fixture
def make_user(app):
    def _make(email="customer@example.com", roles=("CUSTOMER",)):
        with app.app_context():
            user = User(email=email, password_hash=PASSWORD_HASH, full_name="Test Customer", phone_number="9999999999")
            for name in roles:
                user.roles.append(Role.query.filter_by(name=name).first())
            db.session.add(user)
            db.session.commit()
            return user.id
    return _make


@pytest.fixture
def make_workshop(app):
    def _make(max_spots=5, booked=0, slot_date=SLOT_DATE, slot_time=SLOT_TIME,
              location="Basho Studio, Surat", maps_link="https://maps.example.com/basho", is_active=True):
        with app.app_context():
            workshop = Workshop(
                title="Wheel Throwing Basics",
                location=location,
                maps_link=maps_link,
                duration="3 hours",
                price=Decimal("1500.00"),
                is_active=is_active,
            )
            db.session.add(workshop)
            db.session.flush()
            db.session.add(WorkshopSlot(
                workshop_id=workshop.id,
                slot_date=slot_date,
                slot_time=slot_time,
                max_spots=max_spots,
                booked=booked,
            ))
            db.session.commit()
            return workshop.id
    return _make


@pytest.fixture
def make_pending_booking(app):
    counter = {"n": 0}

    def _make(user_id, workshop_id, guests=1, slot_date=SLOT_DATE, slot_time=SLOT_TIME, order_id=None):
        counter["n"] += 1
        with app.app_context():
            booking = WorkshopBooking(
                user_id=user_id,
                workshop_id=workshop_id,
                booking_date=slot_date,
                time_slot=slot_time,
                guests=guests,
                total_amount=Decimal("1500.00") * guests,
                currency="INR",
                customer_name="Test Customer",
                customer_email="customer@example.com",
                customer_phone="9999999999",
                gateway_order_id=order_id or f"order_seed_{counter['n']:04d}",
            )
            db.session.add(booking)
            db.session.commit()
            return booking.id, booking.gateway_order_id
    return _make


@pytest.fixture
def login(client):
    def _login(email="customer@example.com"):
        resp = client.post("/auth/login", json={"email": email, "password": PASSWORD})
        assert resp.status_code == 200, resp.get_json()
        return {"Authorization": f"Bearer {resp.get_json()['token']}"}
    return _login


def slot_state(app, workshop_id, slot_date=SLOT_DATE, slot_time=SLOT_TIME):
    with app.app_context():
        slot = WorkshopSlot.query.filter_by(
            workshop_id=workshop_id, slot_date=slot_date, slot_time=slot_time
        ).first()
        return slot.booked, slot.max_spots


def booking_state(app, booking_id):
    with app.app_context():
        b = db.session.get(WorkshopBooking, booking_id)
        return b.payment_status, b.booking_status
