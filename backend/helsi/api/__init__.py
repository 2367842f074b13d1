"""API module."""

from .profile import router as profile_router
from .logs import router as logs_router
from .dashboard import router as dashboard_router
from .insights import router as insights_router
from .documents import router as documents_router

__all__ = ['profile_router', 'logs_router', 'dashboard_router', 'insights_router', 'documents_router']
