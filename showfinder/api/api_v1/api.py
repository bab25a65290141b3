"""API router for v1 endpoints."""
from fastapi import APIRouter
from showfinder.api.api_v1.endpoints import locations, series, shows

api_router = APIRouter()

# Include routers
api_router.include_router(shows.router, prefix="/shows", tags=["shows"])
api_router.include_router(series.router, prefix="/series", tags=["series"])
api_router.include_router(locations.router, prefix="/locations", tags=["locations"])
