# formstore/main.py
"""
FastAPI application for the form storage admin API.

Run with:
    uvicorn formstore.main:app
"""

from fastapi import FastAPI

from formstore.config import get_settings
from formstore.logging_config import configure_logging
from formstore.routers import storage_router

settings = get_settings()
configure_logging(json_format=settings.LOG_JSON, level=settings.LOG_LEVEL)

app = FastAPI(title="Form Storage")

app.include_router(storage_router)


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


@app.get("/health")
def health() -> dict:
    return {"status": "ok", "service": "formstore", "environment": settings.ENVIRONMENT}
