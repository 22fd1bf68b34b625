"""API v1 router aggregating all endpoints."""

from fastapi import APIRouter

from qr_api.api.v1.endpoints import routing

api_router = APIRouter()

api_router.include_router(routing.router, prefix="/routing", tags=["routing"])
