"""API for checking project status."""
from taskflow.web.api.monitoring.views import router

__all__ = ["router"]
