from fastapi import APIRouter

from portal.api.v1.endpoints.health import router as health_router
from portal.api.v1.endpoints.me import router as me_router
from portal.api.v1.endpoints.bootstrap import router as bootstrap_router
from portal.api.v1.endpoints.agencies import router as agencies_router
from portal.api.v1.endpoints.users import router as users_router
from portal.api.v1.endpoints.properties import router as properties_router
from portal.api.v1.endpoints.projects import router as projects_router
from portal.api.v1.endpoints.floors import router as floors_router
from portal.api.v1.endpoints.metrics import router as metrics_router


router = APIRouter(prefix="/v1")
router.include_router(health_router, tags=["health"])
router.include_router(me_router, tags=["me"])
router.include_router(bootstrap_router, tags=["bootstrap"])
router.include_router(agencies_router, tags=["agencies"])
router.include_router(users_router, tags=["users"])
router.include_router(properties_router, tags=["properties"])
router.include_router(projects_router, tags=["projects"])
router.include_router(floors_router, tags=["floors"])
router.include_router(metrics_router, tags=["metrics"])
