"""External service adapters: LiveKit credentials and Supabase storage."""

from .feedback_store import FeedbackStore
from .livekit_service import LiveKitService

__all__ = ["FeedbackStore", "LiveKitService"]
