"""FastAPI routes for the academy portal."""

from academy_portal.api.auth import Admin, Gate
from academy_portal.api.routes import router

__all__ = ["Admin", "Gate", "router"]
