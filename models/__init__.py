from .db import db
from .admin_user import AdminUser
from .audit_log import AuditLog
