"""Connection details API endpoint."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from ...config import Settings, get_settings
from ...errors import ConfigurationError
from ...models.connection import ConnectionDetails
from ...services.livekit_service import LiveKitService

router = APIRouter()
logger = logging.getLogger(__name__)

NO_STORE = {"Cache-Control": "no-store"}


@router.get("/connection-details", response_model=ConnectionDetails)
async def get_connection_details(
    response: Response,
    settings: Settings = Depends(get_settings),
    agent: str | None = Query(default=None, description="Accepted for compatibility; there is one agent"),
):
    """
    Issue a LiveKit join token for the agent's room.

    Every call gets a new random participant identity and a token valid for
    15 minutes. Responses are never cacheable.
    """
    logger.info("Connection details requested")

    try:
        livekit = LiveKitService.from_settings(settings)
    except ConfigurationError as e:
        raise HTTPException(status_code=500, detail=str(e), headers=NO_STORE)

    try:
        details = livekit.create_connection_details()
    except Exception as e:
        logger.error(f"Error generating connection details: {e}")
        raise HTTPException(status_code=500, detail=str(e) or "Unknown error", headers=NO_STORE)

    response.headers.update(NO_STORE)
    return details
