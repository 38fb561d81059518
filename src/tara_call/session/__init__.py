"""Headless call client: session state machine, timers and transport."""

from .controller import SessionController
from .events import EventBus, EventKind, SubscriptionHandle
from .state import CallSession, CallState, format_elapsed
from .timers import AsyncioScheduler, DeadlineTimer, ResetTimer, Ticker
from .transport import LiveKitTransport, RemoteAudioTrack, SpeakerActivity, Transport
from .wizard import FeedbackWizard, WizardStep

__all__ = [
    "AsyncioScheduler",
    "CallSession",
    "CallState",
    "DeadlineTimer",
    "EventBus",
    "EventKind",
    "FeedbackWizard",
    "LiveKitTransport",
    "RemoteAudioTrack",
    "ResetTimer",
    "SessionController",
    "SpeakerActivity",
    "SubscriptionHandle",
    "Ticker",
    "Transport",
    "WizardStep",
    "format_elapsed",
]
