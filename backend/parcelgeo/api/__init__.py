from fastapi import APIRouter
from parcelgeo.api.routes import health, polygons, boundaries, proximity

api_router = APIRouter()

api_router.include_router(health.router)
api_router.include_router(polygons.router)
api_router.include_router(boundaries.router)
api_router.include_router(proximity.router)
