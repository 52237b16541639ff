from datetime import datetime
from models.db import db

PAYMENT_PENDING = "pending"
PAYMENT_PAID = "paid"
PAYMENT_FAILED = "failed"

BOOKING_PENDING = "pending"
BOOKING_CONFIRMED = "confirmed"
BOOKING_CANCELLED = "cancelled"


class WorkshopBooking(db.Model):
    __tablename__ = "workshop_bookings"

    id = db.Column(db.Integer, primary_key=True)

    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    workshop_id = db.Column(db.Integer, db.ForeignKey("workshops.id"), nullable=False, index=True)

    booking_date = db.Column(db.Date, nullable=False)
    time_slot = db.Column(db.String(20), nullable=False)
    guests = db.Column(db.Integer, nullable=False, default=1)

    total_amount = db.Column(db.Numeric(10, 2), nullable=False)
    currency = db.Column(db.String(10), nullable=False, default="INR")

    customer_name = db.Column(db.String(120), nullable=False)
    customer_email = db.Column(db.String(255), nullable=False)
    customer_phone = db.Column(db.String(30), nullable=False)

    payment_status = db.Column(db.String(20), nullable=False, default=PAYMENT_PENDING)
    # payment_status values: pending, paid, failed
    booking_status = db.Column(db.String(20), nullable=False, default=BOOKING_PENDING)
    # booking_status values: pending, confirmed, cancelled

    gateway_order_id = db.Column(db.String(64), nullable=False, unique=True, index=True)
    gateway_payment_id = db.Column(db.String(64), nullable=True, index=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
    confirmed_at = db.Column(db.DateTime, nullable=True)

    workshop = db.relationship("Workshop")

    __table_args__ = (
        db.CheckConstraint("guests > 0", name="ck_booking_guests_positive"),
        db.CheckConstraint("total_amount > 0", name="ck_booking_amount_positive"),
    )

    @property
    def is_confirmed(self) -> bool:
        return self.payment_status == PAYMENT_PAID and self.booking_status == BOOKING_CONFIRMED

    @property
    def is_pending(self) -> bool:
        return self.payment_status == PAYMENT_PENDING and self.booking_status == BOOKING_PENDING

    @property
    def reference(self) -> str:
        return f"WB-{self.id:06d}"

    def to_dict(self):
        workshop = self.workshop
        return {
            "id": self.id,
            "reference": self.reference,
            "user_id": self.user_id,
            "workshop_id": self.workshop_id,
            "workshop_title": workshop.title if workshop else None,
            "booking_date": self.booking_date.isoformat(),
            "time_slot": self.time_slot,
            "guests": self.guests,
            "total_amount": str(self.total_amount),
            "currency": self.currency,
            "customer_name": self.customer_name,
            "customer_email": self.customer_email,
            "customer_phone": self.customer_phone,
            "payment_status": self.payment_status,
            "booking_status": self.booking_status,
            "gateway_order_id": self.gateway_order_id,
            "gateway_payment_id": self.gateway_payment_id,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
            "confirmed_at": self.confirmed_at.isoformat() if self.confirmed_at else None,
        }
