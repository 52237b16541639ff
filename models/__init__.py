from .db import db
from .user import User, Role, user_roles
from .audit_log import AuditLog
from .session import Session
from .workshop import Workshop
from .slot import WorkshopSlot
from .booking import WorkshopBooking
from .admin_notification import AdminNotification
from .refund_escalation import RefundEscalation
