"""API route aggregation.

All routers registered here get mounted in main.py.

Learn: Unlike a blanket auth dependency on include_router, auth is
declared per route here: GET /courses is public while the other course
routes need a session, and some of those additionally need the
instructor role. The routers themselves pick the right guard.
"""

from fastapi import APIRouter

from coursehub.api.auth import router as auth_router
from coursehub.api.courses import router as courses_router
from coursehub.api.health import router as health_router

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(health_router, tags=["health"])
api_router.include_router(auth_router, tags=["auth"])
api_router.include_router(courses_router, tags=["courses", "enrollment"])
