from fastapi import APIRouter

from .roles import roles_router
from .jds import jds_router
from .customize import customize_router
from .suggest import suggest_router


v1_router = APIRouter(prefix="/api")
v1_router.include_router(roles_router, prefix="/roles", tags=["roles"])
v1_router.include_router(jds_router, prefix="/jds", tags=["jds"])
v1_router.include_router(customize_router, tags=["customize"])
v1_router.include_router(suggest_router, tags=["suggest"])


__all__ = ["v1_router"]
