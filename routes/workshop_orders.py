from flask import Blueprint, request, jsonify, current_app, g

from models.booking import WorkshopBooking
from services.gateway import get_gateway
from services.reservations import ReservationRequest, create_reservation
from utils.auth_context import login_required

workshop_orders_bp = Blueprint("workshop_orders", __name__)


# ---------- CUSTOMERS: start a booking (creates the gateway order) ----------
@workshop_orders_bp.post("/workshop-orders")
@login_required
def create_workshop_order():
    req = ReservationRequest.from_payload(request.get_json(silent=True))
    current_app.logger.info(
        "Creating workshop booking: workshop=%s date=%s time=%s guests=%s user=%s",
        req.workshop_id, req.booking_date, req.time_slot, req.guests, g.user.id,
    )

    result = create_reservation(g.user.id, req, get_gateway())

    return jsonify(
        order_id=result.order_id,
        booking_id=result.booking.id,
        amount=float(result.amount),
        currency=result.currency,
        key_id=current_app.config.get("RAZORPAY_KEY_ID"),
        workshop_title=result.workshop_title,
    ), 200


# ---------- CUSTOMERS: view my workshop bookings ----------
@workshop_orders_bp.get("/workshop-bookings/me")
@login_required
def my_workshop_bookings():
    status = request.args.get("status")  # pending/confirmed/cancelled
    q = WorkshopBooking.query.filter_by(user_id=g.user.id)
    if status:
        q = q.filter_by(booking_status=status)

    rows = q.order_by(WorkshopBooking.created_at.desc()).all()
    return jsonify([b.to_dict() for b in rows]), 200
