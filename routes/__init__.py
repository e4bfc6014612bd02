from .health import health_bp
from .admin_auth import admin_auth_bp
