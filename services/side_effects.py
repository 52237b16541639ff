"""Best-effort work that follows a confirmed booking.

Nothing here may raise into the confirmation path: each step logs its own
failure and reports whether it succeeded.
"""
from flask import current_app, render_template
from sqlalchemy.exc import SQLAlchemyError

from models import db
from models.admin_notification import AdminNotification
from models.booking import WorkshopBooking
from utils.emailer import send_email


def _guest_label(guests: int) -> str:
    return f"{guests} guest{'s' if guests > 1 else ''}"


def notify_admin_of_booking(booking: WorkshopBooking) -> bool:
    workshop_title = booking.workshop.title if booking.workshop else "a workshop"
    try:
        db.session.add(AdminNotification(
            type="workshop_booking",
            title="New Workshop Registration",
            message=(
                f'{booking.customer_name} registered for "{workshop_title}" on '
                f"{booking.booking_date.isoformat()} ({_guest_label(booking.guests)}) - Rs. {booking.total_amount}"
            ),
            booking_id=booking.id,
        ))
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Error creating admin notification for booking %s", booking.id)
        return False

    current_app.logger.info("Admin notification created for booking %s", booking.id)
    return True


def build_confirmation_email(booking: WorkshopBooking):
    """Returns (subject, text_body, html_body)."""
    workshop = booking.workshop
    context = {
        "studio_name": current_app.config.get("STUDIO_NAME"),
        "contact_email": current_app.config.get("STUDIO_CONTACT_EMAIL"),
        "customer_name": booking.customer_name,
        "workshop_title": workshop.title if workshop else "Workshop",
        "formatted_date": booking.booking_date.strftime("%A, %d %B %Y"),
        "time_slot": booking.time_slot,
        "location": (workshop.location if workshop else None) or None,
        "maps_link": (workshop.maps_link if workshop else None) or None,
        "duration": workshop.duration if workshop else None,
        "guests": booking.guests,
        "guests_label": "person" if booking.guests == 1 else "people",
        "amount": f"{booking.total_amount:,.2f}",
        "currency": booking.currency,
        "reference": booking.reference,
    }
    subject = f"Workshop Registration Confirmed - {context['workshop_title']}"
    text_body = render_template("emails/workshop_confirmation.txt", **context)
    html_body = render_template("emails/workshop_confirmation.html", **context)
    return subject, text_body, html_body


def send_confirmation_email(booking: WorkshopBooking) -> bool:
    try:
        subject, text_body, html_body = build_confirmation_email(booking)
        ok, error = send_email(booking.customer_email, subject, text_body, html_body=html_body)
    except Exception:
        current_app.logger.exception("Error sending confirmation email for booking %s", booking.id)
        return False

    if not ok:
        current_app.logger.warning("Confirmation email for booking %s not sent: %s", booking.id, error)
        return False

    current_app.logger.info("Confirmation email sent for booking %s", booking.id)
    return True


def run_booking_side_effects(booking_id: int) -> dict:
    booking = db.session.get(WorkshopBooking, booking_id)
    if not booking or not booking.is_confirmed:
        current_app.logger.warning("Skipping side effects for booking %s: not confirmed", booking_id)
        return {"notification": False, "email": False}

    return {
        "notification": notify_admin_of_booking(booking),
        "email": send_confirmation_email(booking),
    }
