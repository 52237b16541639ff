from datetime import datetime
from models.db import db

class WorkshopSlot(db.Model):
    """One seat counter of the slot ledger, addressed by (workshop_id, slot_date, slot_time).

    ``booked`` is only ever changed through ``services.slot_ledger.try_reserve``.
    """

    __tablename__ = "workshop_slots"

    id = db.Column(db.Integer, primary_key=True)

    workshop_id = db.Column(db.Integer, db.ForeignKey("workshops.id"), nullable=False, index=True)
    slot_date = db.Column(db.Date, nullable=False)
    slot_time = db.Column(db.String(20), nullable=False)  # display label, e.g. "10:00 AM"

    max_spots = db.Column(db.Integer, nullable=False)
    booked = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    workshop = db.relationship("Workshop", back_populates="slots")

    __table_args__ = (
        db.UniqueConstraint("workshop_id", "slot_date", "slot_time", name="uq_workshop_slot_key"),
        db.CheckConstraint("max_spots > 0", name="ck_slot_max_spots_positive"),
        db.CheckConstraint("booked >= 0", name="ck_slot_booked_non_negative"),
        db.CheckConstraint("booked <= max_spots", name="ck_slot_booked_within_capacity"),
    )

    @property
    def remaining(self) -> int:
        return max(self.max_spots - self.booked, 0)

    def to_dict(self):
        return {
            "id": self.id,
            "date": self.slot_date.isoformat(),
            "time": self.slot_time,
            "max_spots": self.max_spots,
            "booked": self.booked,
            "remaining": self.remaining,
        }
