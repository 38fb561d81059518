"""FastAPI dependencies shared by the routers."""

from fastapi import Request

from ..services.feedback_store import FeedbackStore


def get_feedback_store(request: Request) -> FeedbackStore:
    """The feedback store created by the application lifespan."""
    return request.app.state.feedback_store
