"""Call-session states and the transitions allowed between them."""

from dataclasses import dataclass
from enum import Enum

from ..errors import InvalidTransition


class CallState(str, Enum):
    """Where a call session is in its lifecycle."""
    IDLE = "idle"
    CONNECTING = "connecting"
    IN_CALL = "in_call"
    ERROR = "error"
    FEEDBACK_CAPTURE = "feedback_capture"
    DONE = "done"


TRANSITIONS: dict[CallState, frozenset[CallState]] = {
    CallState.IDLE: frozenset({CallState.CONNECTING}),
    CallState.CONNECTING: frozenset({CallState.IN_CALL, CallState.ERROR}),
    CallState.IN_CALL: frozenset({CallState.FEEDBACK_CAPTURE}),
    CallState.ERROR: frozenset({CallState.IDLE}),
    CallState.FEEDBACK_CAPTURE: frozenset({CallState.DONE, CallState.IDLE}),
    CallState.DONE: frozenset({CallState.IDLE}),
}


@dataclass
class CallSession:
    """State of the one call a client can have at a time."""

    state: CallState = CallState.IDLE
    credential: str | None = None
    transport_endpoint: str | None = None
    room_name: str | None = None
    participant_name: str | None = None
    elapsed_seconds: int = 0
    muted: bool = False
    agent_speaking: bool = False
    error: str | None = None
    confirmation: str | None = None

    def can_move_to(self, target: CallState) -> bool:
        return target in TRANSITIONS[self.state]

    def move_to(self, target: CallState) -> CallState:
        """Change state, returning the previous one."""
        if not self.can_move_to(target):
            raise InvalidTransition(self.state, target)
        previous, self.state = self.state, target
        return previous

    def clear(self) -> None:
        """Forget everything about the previous call, keeping the state."""
        self.credential = None
        self.transport_endpoint = None
        self.room_name = None
        self.participant_name = None
        self.elapsed_seconds = 0
        self.muted = False
        self.agent_speaking = False
        self.error = None
        self.confirmation = None


def format_elapsed(seconds: int) -> str:
    """Format seconds as MM:SS for the call timer."""
    minutes, remaining = divmod(max(seconds, 0), 60)
    return f"{minutes:02d}:{remaining:02d}"
