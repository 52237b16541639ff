"""Reservation intake: validate, advisory availability check, gateway order, pending booking."""
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from models import db
from models.booking import WorkshopBooking, PAYMENT_PENDING, BOOKING_PENDING
from models.workshop import Workshop
from services import slot_ledger
from services.errors import ValidationError, NotFound, SlotExhausted, StorageError
from utils.audit import log_event

REQUIRED_FIELDS = (
    "workshop_id",
    "booking_date",
    "time_slot",
    "guests",
    "total_amount",
    "customer_name",
    "customer_email",
    "customer_phone",
)


@dataclass
class ReservationRequest:
    workshop_id: int
    booking_date: date
    time_slot: str
    guests: int
    total_amount: Decimal
    customer_name: str
    customer_email: str
    customer_phone: str

    @classmethod
    def from_payload(cls, data: dict) -> "ReservationRequest":
        data = data or {}
        if not isinstance(data, dict):
            raise ValidationError("Request body must be a JSON object")
        missing = [f for f in REQUIRED_FIELDS if data.get(f) in (None, "")]
        if missing:
            raise ValidationError("Missing required fields: " + ", ".join(missing))

        try:
            workshop_id = int(data["workshop_id"])
        except (TypeError, ValueError):
            raise ValidationError("workshop_id must be an integer")

        try:
            booking_date = date.fromisoformat(str(data["booking_date"]))
        except ValueError:
            raise ValidationError("Invalid booking_date. Use YYYY-MM-DD")

        guests = data["guests"]
        if isinstance(guests, bool) or not isinstance(guests, int):
            raise ValidationError("guests must be an integer")
        if guests <= 0:
            raise ValidationError("guests must be at least 1")

        try:
            total_amount = Decimal(str(data["total_amount"]))
        except InvalidOperation:
            raise ValidationError("total_amount must be a number")
        if not total_amount.is_finite() or total_amount <= 0:
            raise ValidationError("total_amount must be positive")

        customer_name = str(data["customer_name"]).strip()
        customer_email = str(data["customer_email"]).strip().lower()
        customer_phone = str(data["customer_phone"]).strip()
        if not customer_name or not customer_phone:
            raise ValidationError("Customer name and phone are required")
        if "@" not in customer_email or len(customer_email) > 255:
            raise ValidationError("Invalid customer_email")

        return cls(
            workshop_id=workshop_id,
            booking_date=booking_date,
            time_slot=str(data["time_slot"]).strip(),
            guests=guests,
            total_amount=total_amount.quantize(Decimal("0.01")),
            customer_name=customer_name[:120],
            customer_email=customer_email,
            customer_phone=customer_phone[:30],
        )


@dataclass
class ReservationResult:
    order_id: str
    booking: WorkshopBooking
    amount: Decimal
    currency: str
    workshop_title: str


def create_reservation(user_id: int, req: ReservationRequest, gateway) -> ReservationResult:
    workshop = db.session.get(Workshop, req.workshop_id)
    if not workshop or not workshop.is_active:
        raise NotFound("Workshop not found")

    slot = slot_ledger.find_slot(workshop.id, req.booking_date, req.time_slot)
    if slot is None:
        raise ValidationError("Time slot not found")
    if req.guests > slot.max_spots:
        raise ValidationError(f"This slot takes at most {slot.max_spots} guests")

    # Advisory only: a concurrent confirmation may still take these seats.
    available = slot.remaining
    if req.guests > available:
        raise SlotExhausted(f"Only {available} spots available")

    currency = current_app.config.get("PAYMENT_CURRENCY", "INR")

    # Gateway first: if this fails nothing has been written.
    order_id = gateway.create_order(
        req.total_amount,
        currency,
        {
            "workshop_id": workshop.id,
            "workshop_title": workshop.title,
            "booking_date": req.booking_date.isoformat(),
            "time_slot": req.time_slot,
            "guests": req.guests,
            "user_id": user_id,
            "customer_name": req.customer_name,
            "customer_email": req.customer_email,
        },
    )
    current_app.logger.info("Gateway order %s created for workshop %s", order_id, workshop.id)

    booking = WorkshopBooking(
        user_id=user_id,
        workshop_id=workshop.id,
        booking_date=req.booking_date,
        time_slot=req.time_slot,
        guests=req.guests,
        total_amount=req.total_amount,
        currency=currency,
        customer_name=req.customer_name,
        customer_email=req.customer_email,
        customer_phone=req.customer_phone,
        payment_status=PAYMENT_PENDING,
        booking_status=BOOKING_PENDING,
        gateway_order_id=order_id,
    )
    db.session.add(booking)
    try:
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        _report_orphaned_order(user_id, order_id, req, exc)
        raise StorageError("Could not save booking; payment order will be reconciled") from exc

    log_event(
        "WORKSHOP_BOOKING_PENDING",
        user_id=user_id,
        entity="workshop_booking",
        entity_id=booking.id,
        metadata={"gateway_order_id": order_id, "guests": req.guests, "time_slot": req.time_slot},
    )
    return ReservationResult(
        order_id=order_id,
        booking=booking,
        amount=req.total_amount,
        currency=currency,
        workshop_title=workshop.title,
    )


def _report_orphaned_order(user_id, order_id, req: ReservationRequest, exc):
    current_app.logger.error(
        "Orphaned gateway order %s: booking not saved (user=%s workshop=%s date=%s time=%s guests=%s): %s",
        order_id, user_id, req.workshop_id, req.booking_date, req.time_slot, req.guests, exc,
    )
    try:
        log_event(
            "GATEWAY_ORDER_ORPHANED",
            user_id=user_id,
            entity="gateway_order",
            entity_id=order_id,
            metadata={
                "workshop_id": req.workshop_id,
                "booking_date": req.booking_date.isoformat(),
                "time_slot": req.time_slot,
                "guests": req.guests,
                "total_amount": str(req.total_amount),
                "logged_at": datetime.utcnow().isoformat(),
            },
        )
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Could not audit orphaned gateway order %s", order_id)
