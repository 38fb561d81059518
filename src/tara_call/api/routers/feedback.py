"""Post-call feedback API endpoint."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import ValidationError

from ...config import Settings, get_settings
from ...errors import StorageError
from ...models.feedback import FeedbackSubmission
from ...services.feedback_store import FeedbackStore
from ..dependencies import get_feedback_store

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/feedback")
async def submit_feedback(
    request: Request,
    store: FeedbackStore = Depends(get_feedback_store),
    settings: Settings = Depends(get_settings),
):
    """
    Store one feedback submission.

    The body must carry `taskCompleted` (bool), `humanScore` (1-5),
    `feedbackText` (string, may be empty) and optionally `timestamp`.
    Shape errors are answered with 400, storage errors with 500.
    """
    try:
        payload = await request.json()
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid feedback data")

    if not isinstance(payload, dict):
        raise HTTPException(status_code=400, detail="Invalid feedback data")

    try:
        submission = FeedbackSubmission.model_validate(payload)
    except ValidationError as e:
        logger.warning(f"Rejected feedback submission: {e.error_count()} error(s)")
        raise HTTPException(status_code=400, detail="Invalid feedback data")

    try:
        await store.save(submission.to_record(settings.agent_name))
    except StorageError:
        raise HTTPException(status_code=500, detail="Failed to save feedback")

    return {"success": True}
