from fastapi import APIRouter, Depends

from helpdesk.api.deps import get_current_user
from helpdesk.api.routes.activities import router as activity_router
from helpdesk.api.routes.auth import router as auth_router
from helpdesk.api.routes.dashboard import router as dashboard_router
from helpdesk.api.routes.health import router as health_router
from helpdesk.api.routes.references import REFERENCE_PREFIXES, build_reference_router
from helpdesk.api.routes.tickets import router as ticket_router
from helpdesk.api.routes.users import router as user_router

authenticated = [Depends(get_current_user)]

api_router = APIRouter()
api_router.include_router(health_router, tags=["health"])
api_router.include_router(auth_router, tags=["auth"])
api_router.include_router(ticket_router, tags=["tickets"], dependencies=authenticated)
api_router.include_router(activity_router, tags=["activities"], dependencies=authenticated)
api_router.include_router(user_router, tags=["users"], dependencies=authenticated)
api_router.include_router(dashboard_router, tags=["dashboard"], dependencies=authenticated)
for kind in REFERENCE_PREFIXES:
    api_router.include_router(
        build_reference_router(kind),
        tags=["reference"],
        dependencies=authenticated,
    )
