# formstore/auth.py
"""Admin API key check for the storage endpoints."""

import logging
import secrets

from fastapi import Header, HTTPException, Request

from formstore.config import get_settings

logger = logging.getLogger(__name__)


def require_admin_key(
    request: Request,
    x_api_key: str | None = Header(default=None, alias="X-API-Key"),
) -> None:
    """
    Reject requests without the configured admin key.

    An unset ADMIN_API_KEY answers 500; the endpoints are never left open.
    """
    expected_key = get_settings().ADMIN_API_KEY
    if not expected_key:
        logger.error("ADMIN_API_KEY is not configured; refusing storage request")
        raise HTTPException(status_code=500, detail="Storage admin authentication is not configured")

    if x_api_key and secrets.compare_digest(x_api_key.encode(), expected_key.encode()):
        return

    logger.warning(f"Rejected storage request without a valid API key: {request.method} {request.url.path}")
    raise HTTPException(status_code=401, detail="Invalid or missing API key")
