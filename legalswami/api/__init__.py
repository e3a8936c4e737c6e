"""
API routers for the LegalSwami API.

This package contains all API endpoint routers organized by functionality.
"""

from legalswami.api.chat import router as chat_router
from legalswami.api.health import router as health_router
from legalswami.api.routing import router as routing_router

__all__ = ["health_router", "chat_router", "routing_router"]
