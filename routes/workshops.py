from datetime import date
from decimal import Decimal, InvalidOperation

from flask import Blueprint, request, jsonify, g
from sqlalchemy.exc import IntegrityError

from models import db
from models.workshop import Workshop
from models.slot import WorkshopSlot
from security.rbac import require_roles, has_role
from utils.audit import log_event

workshops_bp = Blueprint("workshops", __name__, url_prefix="/workshops")


def _workshop_dict(w: Workshop, include_slots: bool = True):
    out = {
        "id": w.id,
        "title": w.title,
        "tagline": w.tagline,
        "description": w.description,
        "location": w.location,
        "maps_link": w.maps_link,
        "duration": w.duration,
        "price": str(w.price) if w.price is not None else None,
        "is_active": w.is_active,
    }
    if include_slots:
        # remaining is a snapshot for display; confirmation re-checks atomically
        out["time_slots"] = [s.to_dict() for s in w.slots]
    return out


# ---------- PUBLIC: browse workshops ----------
@workshops_bp.get("")
def list_workshops():
    q = Workshop.query
    if not has_role("ADMIN"):
        q = q.filter_by(is_active=True)
    workshops = q.order_by(Workshop.created_at.desc()).all()
    return jsonify([_workshop_dict(w) for w in workshops]), 200


@workshops_bp.get("/<int:workshop_id>")
def get_workshop(workshop_id: int):
    w = db.session.get(Workshop, workshop_id)
    if not w or (not w.is_active and not has_role("ADMIN")):
        return jsonify(error="Workshop not found", code="not_found"), 404
    return jsonify(_workshop_dict(w)), 200


# ---------- ADMIN: manage workshops ----------
@workshops_bp.post("")
@require_roles("ADMIN")
def create_workshop():
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify(error="Request body must be a JSON object", code="validation_error"), 400
    title = (data.get("title") or "").strip()
    if not title:
        return jsonify(error="title is required", code="validation_error"), 400

    price = data.get("price")
    if price is not None:
        try:
            price = Decimal(str(price))
        except InvalidOperation:
            return jsonify(error="price must be a number", code="validation_error"), 400
        if price < 0:
            return jsonify(error="price must not be negative", code="validation_error"), 400

    w = Workshop(
        title=title,
        tagline=(data.get("tagline") or "").strip() or None,
        description=(data.get("description") or "").strip() or None,
        location=(data.get("location") or "").strip() or None,
        maps_link=(data.get("maps_link") or "").strip() or None,
        duration=(data.get("duration") or "").strip() or None,
        price=price,
        is_active=bool(data.get("is_active", True)),
    )
    db.session.add(w)
    db.session.commit()

    log_event("WORKSHOP_CREATE", user_id=g.user.id, entity="workshop", entity_id=w.id)
    return jsonify(_workshop_dict(w)), 201


TEXT_FIELDS = ("tagline", "description", "location", "maps_link", "duration")


@workshops_bp.patch("/<int:workshop_id>")
@require_roles("ADMIN")
def update_workshop(workshop_id: int):
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify(error="Request body must be a JSON object", code="validation_error"), 400

    w = db.session.get(Workshop, workshop_id)
    if not w:
        return jsonify(error="Workshop not found", code="not_found"), 404

    changed = []

    if "title" in data:
        title = (data.get("title") or "").strip()
        if not title:
            return jsonify(error="title cannot be empty", code="validation_error"), 400
        w.title = title
        changed.append("title")

    for field in TEXT_FIELDS:
        if field in data:
            setattr(w, field, (data.get(field) or "").strip() or None)
            changed.append(field)

    if "price" in data:
        price = data.get("price")
        if price is not None:
            try:
                price = Decimal(str(price))
            except InvalidOperation:
                return jsonify(error="price must be a number", code="validation_error"), 400
            if price < 0:
                return jsonify(error="price must not be negative", code="validation_error"), 400
        w.price = price
        changed.append("price")

    if "is_active" in data:
        if not isinstance(data["is_active"], bool):
            return jsonify(error="is_active must be true or false", code="validation_error"), 400
        w.is_active = data["is_active"]
        changed.append("is_active")

    # seat counts are owned by payment confirmation and never edited here
    db.session.commit()

    log_event(
        "WORKSHOP_UPDATE",
        user_id=g.user.id,
        entity="workshop",
        entity_id=w.id,
        metadata={"fields": changed, "is_active": w.is_active},
    )
    return jsonify(_workshop_dict(w)), 200


@workshops_bp.post("/<int:workshop_id>/slots")
@require_roles("ADMIN")
def create_slot(workshop_id: int):
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify(error="Request body must be a JSON object", code="validation_error"), 400
    slot_date = data.get("date")
    slot_time = (data.get("time") or "").strip()
    max_spots = data.get("max_spots")

    if not slot_date or not slot_time or max_spots is None:
        return jsonify(error="date, time, max_spots are required", code="validation_error"), 400

    try:
        day = date.fromisoformat(str(slot_date))
    except ValueError:
        return jsonify(error="Invalid date. Use YYYY-MM-DD", code="validation_error"), 400

    if isinstance(max_spots, bool) or not isinstance(max_spots, int) or max_spots <= 0:
        return jsonify(error="max_spots must be a positive integer", code="validation_error"), 400

    w = db.session.get(Workshop, workshop_id)
    if not w:
        return jsonify(error="Workshop not found", code="not_found"), 404

    # booked always starts at zero; only payment confirmation moves it
    slot = WorkshopSlot(workshop_id=w.id, slot_date=day, slot_time=slot_time, max_spots=max_spots, booked=0)
    db.session.add(slot)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return jsonify(error="Slot already exists for that workshop, date and time", code="conflict"), 409

    log_event("WORKSHOP_SLOT_CREATE", user_id=g.user.id, entity="workshop_slot", entity_id=slot.id)
    return jsonify(slot.to_dict()), 201
