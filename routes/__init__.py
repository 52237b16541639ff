from .health import health_bp
from .auth import auth_bp
from .admin import admin_bp
from .workshops import workshops_bp
from .workshop_orders import workshop_orders_bp
from .workshop_payments import workshop_payments_bp
