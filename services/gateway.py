import time
from decimal import Decimal, ROUND_HALF_UP

import razorpay
from razorpay.errors import SignatureVerificationError
from flask import current_app

from services.errors import GatewayError, SignatureInvalid


def to_minor_units(amount) -> int:
    """Rupees -> paise, rounded half up."""
    return int((Decimal(str(amount)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class RazorpayGateway:
    """Creates orders on Razorpay and checks the payment proof it hands back to the browser."""

    def __init__(self, key_id: str, key_secret: str):
        if not key_id or not key_secret:
            raise GatewayError("Payment gateway credentials not configured")
        self.key_id = key_id
        self._client = razorpay.Client(auth=(key_id, key_secret))

    def create_order(self, amount, currency: str, metadata: dict) -> str:
        payload = {
            "amount": to_minor_units(amount),
            "currency": currency,
            "receipt": f"ws_{int(time.time() * 1000)}",
            # Razorpay only accepts string note values
            "notes": {k: str(v) for k, v in (metadata or {}).items() if v is not None},
        }
        try:
            order = self._client.order.create(data=payload)
        except Exception as exc:
            raise GatewayError("Failed to create payment order") from exc

        order_id = order.get("id") if isinstance(order, dict) else None
        if not order_id:
            raise GatewayError("Payment gateway returned no order id")
        return order_id

    def verify_payment(self, order_id: str, payment_id: str, signature: str):
        """Raise SignatureInvalid unless signature is the gateway's HMAC of order_id|payment_id."""
        if not all(isinstance(v, str) and v for v in (order_id, payment_id, signature)):
            raise SignatureInvalid()
        try:
            self._client.utility.verify_payment_signature({
                "razorpay_order_id": order_id,
                "razorpay_payment_id": payment_id,
                "razorpay_signature": signature,
            })
        except SignatureVerificationError as exc:
            raise SignatureInvalid() from exc
        except (TypeError, ValueError) as exc:
            # non-ascii signatures can't be compared in constant time
            raise SignatureInvalid() from exc


def get_gateway():
    """The app's gateway client; tests swap in a fake via app.extensions."""
    gateway = current_app.extensions.get("payment_gateway")
    if gateway is None:
        gateway = RazorpayGateway(
            current_app.config.get("RAZORPAY_KEY_ID"),
            current_app.config.get("RAZORPAY_KEY_SECRET"),
        )
        current_app.extensions["payment_gateway"] = gateway
    return gateway
