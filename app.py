from flask import Flask, jsonify
from config import Config
from routes import (
    health_bp,
    auth_bp,
    admin_bp,
    workshops_bp,
    workshop_orders_bp,
    workshop_payments_bp,
)

from models import db
from flask_migrate import Migrate
from services.errors import BookingError
from utils.celery_app import celery_init_app
from utils.seed import seed_roles
from utils.auth_context import load_current_user


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    # Register routes
    app.register_blueprint(health_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(admin_bp)
    app.register_blueprint(workshops_bp)
    app.register_blueprint(workshop_orders_bp)
    app.register_blueprint(workshop_payments_bp)

    # Database init
    db.init_app(app)

    # Migrations
    Migrate(app, db)

    # Background side effects
    celery_init_app(app)

    # Seed default roles at startup (safe & idempotent)
    if app.config.get("SEED_ROLES_ON_STARTUP", True):
        with app.app_context():
            seed_roles()

    @app.before_request
    def _load_user():
        load_current_user()

    @app.errorhandler(BookingError)
    def _booking_error(exc: BookingError):
        if exc.status_code >= 500:
            app.logger.error("%s: %s", exc.code, exc.message, exc_info=exc.__cause__)
        else:
            app.logger.info("Booking request rejected (%s): %s", exc.code, exc.message)
        return jsonify(error=exc.message, code=exc.code), exc.status_code

    @app.after_request
    def add_security_headers(resp):
        resp.headers["X-Content-Type-Options"] = "nosniff"
        resp.headers["X-Frame-Options"] = "DENY"
        resp.headers["Referrer-Policy"] = "no-referrer"
        resp.headers["Permissions-Policy"] = "geolocation=(), microphone=(), camera=()"
        resp.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none';"
        return resp


    register_cli(app)


    return app

#-------------------------
import click
from models.user import User, Role

def register_cli(app):
    @app.cli.command("seed-roles")
    def seed_roles_command():
        """Create the default roles if missing."""
        seed_roles()
        print("Roles seeded")

    @app.cli.command("make-admin")
    @click.argument("email")
    def make_admin(email):
        """Promote a user to ADMIN by email (bootstrap)."""
        user = User.query.filter_by(email=email.strip().lower()).first()
        if not user:
            print("User not found")
            return

        admin_role = Role.query.filter_by(name="ADMIN").first()
        if not admin_role:
            admin_role = Role(name="ADMIN")
            db.session.add(admin_role)
            db.session.commit()

        if admin_role not in user.roles:
            user.roles.append(admin_role)
            db.session.commit()

        print(f"{user.email} promoted to ADMIN")

#-------------------------


if __name__ == "__main__":
    app = create_app()
    # Run locally
    app.run(host="127.0.0.1", port=5002)
