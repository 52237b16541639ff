from datetime import date, datetime
from flask import Blueprint, jsonify, g, request
from security.rbac import require_roles
from utils.audit import log_event
from models import db
from models.admin_notification import AdminNotification
from models.booking import WorkshopBooking
from models.refund_escalation import RefundEscalation

admin_bp = Blueprint("admin", __name__, url_prefix="/admin")


# ---------- ADMIN: notification feed ----------
@admin_bp.get("/notifications")
@require_roles("ADMIN")
def list_notifications():
    q = AdminNotification.query
    if request.args.get("unread") in ("1", "true"):
        q = q.filter_by(is_read=False)

    rows = q.order_by(AdminNotification.created_at.desc(), AdminNotification.id.desc()).limit(200).all()
    unread = AdminNotification.query.filter_by(is_read=False).count()
    return jsonify(
        unread=unread,
        notifications=[
            {
                "id": n.id,
                "type": n.type,
                "title": n.title,
                "message": n.message,
                "booking_id": n.booking_id,
                "is_read": n.is_read,
                "created_at": n.created_at.isoformat(),
            }
            for n in rows
        ],
    ), 200


@admin_bp.post("/notifications/<int:notification_id>/read")
@require_roles("ADMIN")
def mark_notification_read(notification_id: int):
    n = db.session.get(AdminNotification, notification_id)
    if not n:
        return jsonify(error="Notification not found", code="not_found"), 404

    n.is_read = True
    db.session.commit()
    return jsonify(message="Marked as read"), 200


@admin_bp.delete("/notifications/<int:notification_id>")
@require_roles("ADMIN")
def delete_notification(notification_id: int):
    n = db.session.get(AdminNotification, notification_id)
    if not n:
        return jsonify(error="Notification not found", code="not_found"), 404

    db.session.delete(n)
    db.session.commit()

    log_event(
        "ADMIN_NOTIFICATION_DELETE",
        user_id=g.user.id,
        entity="admin_notification",
        entity_id=notification_id,
    )
    return jsonify(message="Deleted"), 200


@admin_bp.post("/notifications/read_all")
@require_roles("ADMIN")
def mark_all_notifications_read():
    count = AdminNotification.query.filter_by(is_read=False).update({"is_read": True})
    db.session.commit()
    return jsonify(message="Marked all as read", updated=count), 200


# ---------- ADMIN: workshop bookings ----------
@admin_bp.get("/workshop-bookings")
@require_roles("ADMIN")
def list_workshop_bookings():
    workshop_id = request.args.get("workshop_id", type=int)
    status = request.args.get("status")
    payment_status = request.args.get("payment_status")
    date_str = request.args.get("date")  # YYYY-MM-DD

    q = WorkshopBooking.query
    if workshop_id:
        q = q.filter_by(workshop_id=workshop_id)
    if status:
        q = q.filter_by(booking_status=status)
    if payment_status:
        q = q.filter_by(payment_status=payment_status)
    if date_str:
        try:
            day = date.fromisoformat(date_str)
        except ValueError:
            return jsonify(error="Invalid date. Use YYYY-MM-DD", code="validation_error"), 400
        q = q.filter_by(booking_date=day)

    rows = q.order_by(WorkshopBooking.created_at.desc()).limit(200).all()
    log_event("ADMIN_WORKSHOP_BOOKINGS_VIEW", user_id=g.user.id)
    return jsonify([b.to_dict() for b in rows]), 200


# ---------- ADMIN: paid-but-full refunds ----------
@admin_bp.get("/refund-escalations")
@require_roles("ADMIN")
def list_refund_escalations():
    status = (request.args.get("status") or "").strip().upper()
    q = RefundEscalation.query
    if status:
        q = q.filter_by(status=status)

    rows = q.order_by(RefundEscalation.created_at.desc()).limit(200).all()
    return jsonify([
        {
            "id": r.id,
            "booking_id": r.booking_id,
            "user_id": r.user_id,
            "gateway_order_id": r.gateway_order_id,
            "gateway_payment_id": r.gateway_payment_id,
            "amount": str(r.amount),
            "currency": r.currency,
            "reason": r.reason,
            "status": r.status,
            "resolution_note": r.resolution_note,
            "resolved_by": r.resolved_by,
            "resolved_at": r.resolved_at.isoformat() if r.resolved_at else None,
            "created_at": r.created_at.isoformat(),
        }
        for r in rows
    ]), 200


@admin_bp.post("/refund-escalations/<int:escalation_id>/resolve")
@require_roles("ADMIN")
def resolve_refund_escalation(escalation_id: int):
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify(error="Request body must be a JSON object", code="validation_error"), 400
    note = (data.get("note") or "").strip() or None

    r = db.session.get(RefundEscalation, escalation_id)
    if not r:
        return jsonify(error="Escalation not found", code="not_found"), 404
    if r.status == "RESOLVED":
        return jsonify(error="Escalation already resolved", code="validation_error"), 400

    r.status = "RESOLVED"
    r.resolution_note = note[:255] if note else None
    r.resolved_by = g.user.id
    r.resolved_at = datetime.utcnow()
    db.session.commit()

    log_event(
        "REFUND_ESCALATION_RESOLVED",
        user_id=g.user.id,
        entity="refund_escalation",
        entity_id=r.id,
        metadata={"booking_id": r.booking_id, "note": note},
    )
    return jsonify(message="Resolved"), 200
