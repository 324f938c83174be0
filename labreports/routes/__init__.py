from .health import health_bp
from .reports import reports_bp

__all__ = ['health_bp', 'reports_bp']
