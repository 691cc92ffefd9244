from fastapi.routing import APIRouter

from taskflow.auth import auth_router
from taskflow.tasks import endpoints as tasks
from taskflow.time_tracking import endpoints as time_tracking
from taskflow.web.api import monitoring

api_router = APIRouter()
api_router.include_router(monitoring.router)
api_router.include_router(auth_router, tags=["authentication"])
api_router.include_router(tasks.router, prefix="/tasks", tags=["tasks"])
api_router.include_router(time_tracking.router, tags=["time tracking"])
