"""Payment confirmation: verify the gateway proof and commit seats exactly once."""
from datetime import datetime

from flask import current_app
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from models import db
from models.admin_notification import AdminNotification
from models.booking import (
    WorkshopBooking,
    PAYMENT_PENDING, PAYMENT_PAID, PAYMENT_FAILED,
    BOOKING_PENDING, BOOKING_CONFIRMED, BOOKING_CANCELLED,
)
from models.refund_escalation import RefundEscalation
from services import slot_ledger
from services.dispatch import dispatch_booking_confirmed
from services.errors import NotFound, SignatureInvalid, SlotExhausted, ValidationError
from services.gateway import get_gateway
from utils.audit import log_event


def confirm_payment(*, user_id: int, booking_id, gateway_order_id: str,
                    gateway_payment_id: str, gateway_signature: str) -> WorkshopBooking:
    """Confirm a pending booking whose payment the gateway has signed.

    Idempotent per (booking_id, gateway_payment_id): a repeated call after success
    returns the confirmed booking without touching the slot ledger again.
    """
    if not gateway_order_id or not gateway_payment_id or not gateway_signature or booking_id in (None, ""):
        raise ValidationError("Missing payment verification fields")
    try:
        booking_id = int(booking_id)
    except (TypeError, ValueError):
        raise ValidationError("booking_id must be an integer")

    try:
        get_gateway().verify_payment(gateway_order_id, gateway_payment_id, gateway_signature)
    except SignatureInvalid:
        current_app.logger.warning("Signature mismatch for order %s (booking %s)", gateway_order_id, booking_id)
        log_event(
            "WORKSHOP_PAYMENT_SIGNATURE_INVALID",
            user_id=user_id,
            entity="workshop_booking",
            entity_id=booking_id,
            metadata={"gateway_order_id": gateway_order_id, "gateway_payment_id": gateway_payment_id},
        )
        raise

    booking = _find_owned_booking(user_id, booking_id, gateway_order_id)

    if not booking.is_pending:
        return _already_settled(booking, gateway_payment_id)

    now = datetime.utcnow()
    try:
        promoted = db.session.execute(
            update(WorkshopBooking)
            .where(WorkshopBooking.id == booking.id)
            .where(WorkshopBooking.payment_status == PAYMENT_PENDING)
            .where(WorkshopBooking.booking_status == BOOKING_PENDING)
            .values(
                payment_status=PAYMENT_PAID,
                booking_status=BOOKING_CONFIRMED,
                gateway_payment_id=gateway_payment_id,
                confirmed_at=now,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        if promoted.rowcount != 1:
            # another request settled this booking first
            db.session.rollback()
            db.session.refresh(booking)
            return _already_settled(booking, gateway_payment_id)

        reserved = slot_ledger.try_reserve(
            booking.workshop_id, booking.booking_date, booking.time_slot, booking.guests
        )
        if not reserved:
            db.session.rollback()
            _escalate_paid_without_seat(booking, gateway_payment_id)
            raise SlotExhausted("Slot filled up before payment was confirmed; a refund has been queued")

        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise

    db.session.refresh(booking)
    current_app.logger.info(
        "Booking %s confirmed: %s guest(s) on workshop %s %s %s",
        booking.id, booking.guests, booking.workshop_id, booking.booking_date, booking.time_slot,
    )
    log_event(
        "WORKSHOP_PAYMENT_CONFIRMED",
        user_id=user_id,
        entity="workshop_booking",
        entity_id=booking.id,
        metadata={"gateway_order_id": gateway_order_id, "gateway_payment_id": gateway_payment_id},
    )

    dispatch_booking_confirmed(booking.id)
    return booking


def _find_owned_booking(user_id, booking_id, gateway_order_id) -> WorkshopBooking:
    booking = WorkshopBooking.query.filter_by(
        id=booking_id,
        gateway_order_id=gateway_order_id,
        user_id=user_id,
    ).first()
    if not booking:
        raise NotFound("Booking not found")
    return booking


def _already_settled(booking: WorkshopBooking, gateway_payment_id: str) -> WorkshopBooking:
    if booking.is_confirmed:
        if booking.gateway_payment_id == gateway_payment_id:
            return booking
        raise ValidationError("Booking already confirmed with a different payment")

    if booking.booking_status == BOOKING_CANCELLED:
        escalated = RefundEscalation.query.filter_by(booking_id=booking.id).first()
        if escalated:
            raise SlotExhausted("Slot filled up before payment was confirmed; a refund has been queued")
        raise ValidationError("Booking is cancelled")

    raise ValidationError("Booking cannot be confirmed")


def _escalate_paid_without_seat(booking: WorkshopBooking, gateway_payment_id: str):
    """Money was captured but the seats are gone: cancel the booking and queue a manual refund."""
    current_app.logger.error(
        "Payment %s captured for booking %s but slot %s %s on workshop %s is full; manual refund required",
        gateway_payment_id, booking.id, booking.booking_date, booking.time_slot, booking.workshop_id,
    )

    now = datetime.utcnow()
    try:
        cancelled = db.session.execute(
            update(WorkshopBooking)
            .where(WorkshopBooking.id == booking.id)
            .where(WorkshopBooking.payment_status == PAYMENT_PENDING)
            .where(WorkshopBooking.booking_status == BOOKING_PENDING)
            .values(
                payment_status=PAYMENT_FAILED,
                booking_status=BOOKING_CANCELLED,
                gateway_payment_id=gateway_payment_id,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        if cancelled.rowcount != 1:
            db.session.rollback()
            return

        db.session.add(RefundEscalation(
            booking_id=booking.id,
            user_id=booking.user_id,
            gateway_order_id=booking.gateway_order_id,
            gateway_payment_id=gateway_payment_id,
            amount=booking.total_amount,
            currency=booking.currency,
            reason="slot_exhausted",
            status="OPEN",
        ))
        db.session.add(AdminNotification(
            type="refund_required",
            title="Refund Required",
            message=(
                f"Payment {gateway_payment_id} from {booking.customer_name} for "
                f"{booking.guests} guest(s) on {booking.booking_date.isoformat()} {booking.time_slot} "
                f"was captured but the slot is full. Refund Rs. {booking.total_amount}."
            ),
            booking_id=booking.id,
        ))
        db.session.commit()
    except IntegrityError:
        # escalation already recorded by a concurrent request
        db.session.rollback()
        return
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Could not record refund escalation for booking %s", booking.id)
        raise

    log_event(
        "WORKSHOP_PAYMENT_SLOT_EXHAUSTED",
        user_id=booking.user_id,
        entity="workshop_booking",
        entity_id=booking.id,
        metadata={"gateway_order_id": booking.gateway_order_id, "gateway_payment_id": gateway_payment_id},
    )
