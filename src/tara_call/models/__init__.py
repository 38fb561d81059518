"""Data models for the Tara call backend."""

from .connection import ConnectionDetails
from .feedback import FeedbackRecord, FeedbackSubmission

__all__ = [
    "ConnectionDetails",
    "FeedbackRecord",
    "FeedbackSubmission",
]
