from taskflow.auth.endpoints import router as auth_router

__all__ = ["auth_router"]
