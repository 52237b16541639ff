from datetime import datetime
from models.db import db

class RefundEscalation(db.Model):
    """A captured payment whose seats could not be committed; needs a manual refund."""

    __tablename__ = "refund_escalations"

    id = db.Column(db.Integer, primary_key=True)

    booking_id = db.Column(db.Integer, db.ForeignKey("workshop_bookings.id"), nullable=False, unique=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    gateway_order_id = db.Column(db.String(64), nullable=False)
    gateway_payment_id = db.Column(db.String(64), nullable=False)
    amount = db.Column(db.Numeric(10, 2), nullable=False)
    currency = db.Column(db.String(10), nullable=False, default="INR")

    reason = db.Column(db.String(60), nullable=False, default="slot_exhausted")
    status = db.Column(db.String(20), nullable=False, default="OPEN")  # OPEN, RESOLVED
    resolution_note = db.Column(db.String(255), nullable=True)
    resolved_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    resolved_at = db.Column(db.DateTime, nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
