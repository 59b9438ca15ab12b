from .health import health_bp
from .calls import calls_bp
from .refunds import refunds_bp
from .admin_calls import admin_calls_bp
from .admin_refunds import admin_refunds_bp
