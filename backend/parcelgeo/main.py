import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.utils import get_openapi

from parcelgeo.core.config import get_settings
from parcelgeo.api import api_router

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

settings = get_settings()

app = FastAPI(
    title="ParcelGeo",
    description="""
    ## ParcelGeo API

    Geospatial backend for a land and property listing marketplace.

    ### Features

    * **Polygon Validation**: Area, shape and location checks for drawn parcel boundaries
    * **Duplicate Detection**: Overlap and similarity checks against existing listings
    * **Boundary Detection**: Region, district, ward and street/village of a parcel
    * **Proximity Analysis**: Nearest roads, hospitals, schools, marketplaces and transit from OpenStreetMap

    ### API Endpoints

    * `/api/v1/health` - System health check
    * `/api/v1/polygons` - Polygon validation, comparison and display helpers
    * `/api/v1/boundaries` - Administrative boundary detection
    * `/api/v1/proximity` - Listing proximity analysis
    """,
    version="1.0.0",
    openapi_tags=[
        {
            "name": "Health",
            "description": "System health check and status information",
        },
        {
            "name": "Polygons",
            "description": "Polygon validation, overlap and similarity, simplification and edge dimensions",
        },
        {
            "name": "Boundaries",
            "description": "Administrative boundary detection for listing polygons",
        },
        {
            "name": "Proximity",
            "description": "Nearest amenities of a listing from OpenStreetMap (Overpass API)",
        },
    ],
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API router
app.include_router(api_router, prefix=settings.api_v1_prefix)


@app.get(
    "/",
    summary="API Root Endpoint",
    description="Returns basic information about the API",
    tags=["Health"]
)
def root():
    return {
        "name": "ParcelGeo",
        "version": "1.0.0",
        "status": "running",
        "docs": {
            "swagger": "/docs",
            "redoc": "/redoc",
            "openapi": "/openapi.json"
        }
    }


def custom_openapi():
    """Custom OpenAPI schema generator"""
    if app.openapi_schema:
        return app.openapi_schema

    openapi_schema = get_openapi(
        title=app.title,
        version=app.version,
        description=app.description,
        routes=app.routes,
        tags=app.openapi_tags,
    )

    app.openapi_schema = openapi_schema
    return app.openapi_schema


app.openapi = custom_openapi
