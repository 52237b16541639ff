from flask import Blueprint, request, jsonify, g

from services.confirmation import confirm_payment
from services.errors import ValidationError
from utils.auth_context import login_required

workshop_payments_bp = Blueprint("workshop_payments", __name__, url_prefix="/workshop-payments")


@workshop_payments_bp.post("/verify")
@login_required
def verify_workshop_payment():
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")

    booking = confirm_payment(
        user_id=g.user.id,
        booking_id=data.get("booking_id"),
        gateway_order_id=data.get("gateway_order_id"),
        gateway_payment_id=data.get("gateway_payment_id"),
        gateway_signature=data.get("gateway_signature"),
    )
    return jsonify(success=True, booking=booking.to_dict()), 200
