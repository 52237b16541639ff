from flask import Blueprint, request, jsonify, current_app, g

from models import db
from models.user import User, Role
from security.password import hash_password, verify_password
from security.session import create_session, revoke_session, revoke_all_sessions, bearer_token_from_request
from utils.audit import log_event
from utils.auth_context import login_required


auth_bp = Blueprint("auth", __name__, url_prefix="/auth")

MIN_PASSWORD_LENGTH = 8


def _is_valid_email(email: str) -> bool:
    return isinstance(email, str) and "@" in email and len(email) <= 255


@auth_bp.post("/register")
def register():
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify(error="Request body must be a JSON object", code="validation_error"), 400
    email = (data.get("email") or "").strip().lower()
    password = data.get("password") or ""
    full_name = (data.get("full_name") or "").strip() or None
    phone_number = (data.get("phone_number") or "").strip() or None

    if not _is_valid_email(email):
        return jsonify(error="Invalid email", code="validation_error"), 400
    if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
        return jsonify(error=f"Password must be at least {MIN_PASSWORD_LENGTH} characters", code="validation_error"), 400

    if User.query.filter_by(email=email).first():
        log_event("REGISTER_FAIL_EMAIL_EXISTS", metadata={"email": email})
        return jsonify(error="Email already registered", code="conflict"), 409

    user = User(
        email=email,
        password_hash=hash_password(password),
        full_name=full_name,
        phone_number=phone_number,
    )
    db.session.add(user)
    db.session.flush()

    customer_role = Role.query.filter_by(name="CUSTOMER").first()
    if customer_role:
        user.roles.append(customer_role)

    db.session.commit()
    log_event("REGISTER_SUCCESS", user_id=user.id)

    return jsonify(message="Registered successfully", id=user.id), 201


@auth_bp.post("/login")
def login():
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify(error="Request body must be a JSON object", code="validation_error"), 400
    email = (data.get("email") or "").strip().lower()
    password = data.get("password") or ""

    user = User.query.filter_by(email=email).first()
    if not user or not verify_password(password, user.password_hash):
        log_event("LOGIN_FAIL", user_id=user.id if user else None, metadata={"email": email})
        return jsonify(error="Invalid credentials", code="unauthenticated"), 401

    raw_token = create_session(user.id)
    log_event("LOGIN_SUCCESS", user_id=user.id)

    return jsonify(
        token=raw_token,
        token_type="Bearer",
        expires_in=current_app.config.get("SESSION_LIFETIME_SECONDS", 8 * 60 * 60),
    ), 200


@auth_bp.get("/me")
@login_required
def me():
    return jsonify(
        id=g.user.id,
        email=g.user.email,
        roles=[r.name for r in g.user.roles],
        full_name=g.user.full_name,
        phone_number=g.user.phone_number,
    ), 200


@auth_bp.post("/logout")
@login_required
def logout():
    revoke_session(bearer_token_from_request())
    log_event("LOGOUT", user_id=g.user.id)
    return jsonify(message="Logged out"), 200


@auth_bp.post("/logout_all")
@login_required
def logout_all():
    count = revoke_all_sessions(g.user.id)
    log_event("LOGOUT_ALL", user_id=g.user.id, metadata={"revoked_sessions": count})
    return jsonify(message="Logged out everywhere", revoked_sessions=count), 200
