"""Seat counters for workshop slots.

Each ``WorkshopSlot`` row is an independent counter keyed by
``(workshop_id, slot_date, slot_time)``. The only write path is
``try_reserve``, a single conditional UPDATE whose capacity predicate is
evaluated by the database together with the increment, so concurrent
confirmations can never push ``booked`` past ``max_spots``.
"""
from datetime import date

from sqlalchemy import update

from models import db
from models.slot import WorkshopSlot


def find_slot(workshop_id: int, slot_date: date, slot_time: str):
    return WorkshopSlot.query.filter_by(
        workshop_id=workshop_id,
        slot_date=slot_date,
        slot_time=slot_time,
    ).first()


def remaining_spots(workshop_id: int, slot_date: date, slot_time: str):
    """Advisory read of free seats; None when the slot does not exist.

    The value may be stale by the time it is used and must never gate a write.
    """
    slot = find_slot(workshop_id, slot_date, slot_time)
    if slot is None:
        return None
    return slot.remaining


def try_reserve(workshop_id: int, slot_date: date, slot_time: str, seats: int) -> bool:
    """Atomically add ``seats`` to the slot if they fit. Returns False when they don't.

    Runs inside the caller's transaction; the caller commits or rolls back.
    """
    if seats <= 0:
        raise ValueError("seats must be positive")

    stmt = (
        update(WorkshopSlot)
        .where(WorkshopSlot.workshop_id == workshop_id)
        .where(WorkshopSlot.slot_date == slot_date)
        .where(WorkshopSlot.slot_time == slot_time)
        .where(WorkshopSlot.booked + seats <= WorkshopSlot.max_spots)
        .values(booked=WorkshopSlot.booked + seats)
        .execution_options(synchronize_session=False)
    )
    res = db.session.execute(stmt)
    return res.rowcount == 1
