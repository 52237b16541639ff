from datetime import datetime
from models.db import db

class Workshop(db.Model):
    __tablename__ = "workshops"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(160), nullable=False)
    tagline = db.Column(db.String(255), nullable=True)
    description = db.Column(db.Text, nullable=True)
    location = db.Column(db.String(255), nullable=True)
    maps_link = db.Column(db.String(255), nullable=True)
    duration = db.Column(db.String(60), nullable=True)  # free text, e.g. "3 hours"

    price = db.Column(db.Numeric(10, 2), nullable=True)  # per guest, informational
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    slots = db.relationship(
        "WorkshopSlot",
        back_populates="workshop",
        order_by="[WorkshopSlot.slot_date, WorkshopSlot.id]",
        cascade="all, delete-orphan",
    )
