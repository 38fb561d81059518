"""Exceptions shared by the API server and the call client."""


class TaraCallError(Exception):
    """Base class for all errors raised by this package."""


class ConfigurationError(TaraCallError):
    """A setting required to serve the request is missing."""


class StorageError(TaraCallError):
    """Writing to the feedback store failed."""


class ConnectionDetailsError(TaraCallError):
    """Connection details could not be fetched or were malformed."""


class TransportError(TaraCallError):
    """Joining or leaving the audio room failed."""


class MicrophoneError(TransportError):
    """The microphone could not be enabled."""


class InvalidTransition(TaraCallError):
    """A call session was asked to move to a state it cannot reach."""

    def __init__(self, current, target):
        self.current = current
        self.target = target
        super().__init__(f"Cannot move call session from {current.value} to {target.value}")


class IncompleteFeedback(TaraCallError):
    """A feedback submission was built before all required answers were given."""
