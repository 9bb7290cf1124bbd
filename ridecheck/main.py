"""FastAPI application setup for the motorcycle commute weather check."""

from fastapi import FastAPI

from .api import router as api_router
from .config import settings

app = FastAPI(title=settings.app_name, version=settings.version)


@app.get("/")
def service_info():
    """Identify the service and point at the API prefix."""
    return {"name": settings.app_name, "version": settings.version, "api": "/v1"}


# API routes
app.include_router(api_router, prefix="/v1")
