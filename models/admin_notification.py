from datetime import datetime
from models.db import db

class AdminNotification(db.Model):
    __tablename__ = "admin_notifications"

    id = db.Column(db.Integer, primary_key=True)
    type = db.Column(db.String(40), nullable=False)  # workshop_booking, refund_required
    title = db.Column(db.String(160), nullable=False)
    message = db.Column(db.Text, nullable=False)

    booking_id = db.Column(db.Integer, db.ForeignKey("workshop_bookings.id"), nullable=True, index=True)
    is_read = db.Column(db.Boolean, default=False, nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
