"""Client-side call-session state machine.

Drives one call from the welcome screen to the feedback form and back:

    idle -> connecting -> in_call -> feedback_capture -> done -> idle

with `error` reachable from `connecting` and left again on retry. All
methods run on a single asyncio event loop.
"""

import asyncio
import logging
from typing import Any, Callable

import httpx

from ..config import Settings, get_settings
from ..errors import ConnectionDetailsError, InvalidTransition, MicrophoneError, TransportError
from ..models.feedback import FeedbackSubmission
from .events import EventBus, EventKind, SubscriptionHandle
from .state import CallSession, CallState
from .timers import AsyncioScheduler, DeadlineTimer, ResetTimer, Scheduler, Ticker
from .transport import RemoteAudioTrack, SpeakerActivity, Transport
from .wizard import FeedbackWizard

logger = logging.getLogger(__name__)

CONNECTION_DETAILS_PATH = "/api/connection-details"
FEEDBACK_PATH = "/api/feedback"
TICK_INTERVAL = 1.0
CLOSED_MESSAGE = "Call cancelled: client closed"


class SessionController:
    """Owns the single CallSession of a client.

    Args:
        transport: Real-time audio transport (see `LiveKitTransport`)
        http_client: Client whose `base_url` points at the API server
        settings: Durations and names; defaults to `get_settings()`
        scheduler: Timer backend; defaults to the running event loop
        on_alert: Called with blocking user-facing messages
    """

    def __init__(
        self,
        transport: Transport,
        http_client: httpx.AsyncClient,
        settings: Settings | None = None,
        scheduler: Scheduler | None = None,
        on_alert: Callable[[str], Any] | None = None,
    ):
        self.transport = transport
        self.http = http_client
        self.settings = settings or get_settings()
        self.scheduler = scheduler or AsyncioScheduler()
        self.on_alert = on_alert or (lambda message: logger.warning(f"ALERT: {message}"))

        self.session = CallSession()
        self.events = EventBus()
        self.wizard: FeedbackWizard | None = None
        self.remote_audio: dict[str, RemoteAudioTrack] = {}

        self._expiry: DeadlineTimer | None = None
        self._ticker: Ticker | None = None
        self._reset_timer: ResetTimer | None = None
        self._transport_handles: list[SubscriptionHandle] = []
        self._teardown: asyncio.Task | None = None
        self._submitting = False
        self._closed = False

    @property
    def state(self) -> CallState:
        return self.session.state

    def subscribe(self, kind: EventKind, handler: Callable[..., Any]) -> SubscriptionHandle:
        """Observe controller events, e.g. `EventKind.STATE_CHANGED`."""
        return self.events.subscribe(kind, handler)

    def release(self, handle: SubscriptionHandle) -> bool:
        return self.events.release(handle)

    async def connect(self) -> bool:
        """Fetch credentials and join the agent's room.

        Ignored unless the session is idle or errored, so at most one
        credential request is ever outstanding. Returns True once in call.
        """
        if self._closed:
            logger.info("connect() ignored after close()")
            return False
        if self.state not in (CallState.IDLE, CallState.ERROR):
            logger.info(f"connect() ignored while {self.state.value}")
            return False

        if self.state == CallState.ERROR:
            self._move(CallState.IDLE)
        self.session.clear()
        self._move(CallState.CONNECTING)

        try:
            details = await self._fetch_connection_details()
        except ConnectionDetailsError as e:
            self._fail(str(e))
            return False
        if self._closed:
            self._fail(CLOSED_MESSAGE)
            return False

        self.session.credential = details["participantToken"]
        self.session.transport_endpoint = details["serverUrl"]
        self.session.room_name = details.get("roomName")
        self.session.participant_name = details.get("participantName")

        try:
            await self.transport.connect(self.session.transport_endpoint, self.session.credential)
        except TransportError as e:
            self._fail(str(e))
            return False
        if self._closed:
            await self._teardown_transport()
            self._fail(CLOSED_MESSAGE)
            return False

        self._transport_handles = self.transport.events.subscribe_many({
            EventKind.TRACK_SUBSCRIBED: self._on_track_subscribed,
            EventKind.TRACK_UNSUBSCRIBED: self._on_track_unsubscribed,
            EventKind.ACTIVE_SPEAKERS_CHANGED: self._on_active_speakers_changed,
            EventKind.DISCONNECTED: self._on_transport_disconnected,
        })
        self._move(CallState.IN_CALL)
        if self.state != CallState.IN_CALL:
            # a state observer hung up already
            return True
        self._start_call_timers()
        await self._enable_microphone()
        return True

    async def _fetch_connection_details(self) -> dict:
        try:
            response = await self.http.get(
                CONNECTION_DETAILS_PATH,
                params={"agent": self.settings.agent_name},
            )
        except httpx.HTTPError as e:
            raise ConnectionDetailsError(f"Failed to get connection details: {e}") from e

        if response.is_error:
            raise ConnectionDetailsError(f"Failed to get connection details: {response.reason_phrase}")

        try:
            data = response.json()
        except ValueError as e:
            raise ConnectionDetailsError("Invalid connection details received") from e

        if not isinstance(data, dict) or not data.get("participantToken") or not data.get("serverUrl"):
            raise ConnectionDetailsError("Invalid connection details received")

        logger.info(f"Received connection details for room {data.get('roomName')}")
        return data

    async def _enable_microphone(self) -> None:
        try:
            await self.transport.set_microphone_enabled(True)
        except MicrophoneError as e:
            logger.error(f"Error getting audio permissions: {e}")
            self.on_alert(f"Please allow microphone access to talk with {self.settings.agent_display_name}.")

    def _fail(self, message: str) -> None:
        logger.error(f"Error connecting to agent: {message}")
        self.session.error = message
        self._move(CallState.ERROR)

    def _start_call_timers(self) -> None:
        self._expiry = DeadlineTimer(
            self.settings.max_call_duration,
            self.auto_expire,
            self.scheduler,
            name="auto_expire",
        )
        self._ticker = Ticker(TICK_INTERVAL, self.tick, self.scheduler)
        self._expiry.arm()
        self._ticker.start()
        logger.info(f"Call will automatically end after {self.settings.max_call_duration} seconds")

    def _stop_call_timers(self) -> None:
        if self._expiry is not None:
            self._expiry.cancel()
        if self._ticker is not None:
            self._ticker.stop()

    def tick(self) -> None:
        """Advance the on-screen call timer by one second."""
        if self.state == CallState.IN_CALL:
            self.session.elapsed_seconds += 1

    def auto_expire(self) -> None:
        """End the call once the maximum duration is reached."""
        if self.state == CallState.IN_CALL:
            # the last tick may be due at the same instant as the deadline
            self.session.elapsed_seconds = max(self.session.elapsed_seconds, int(self.settings.max_call_duration))
        logger.info(f"Auto-disconnecting after {self.settings.max_call_duration} seconds")
        self.disconnect()

    async def toggle_mute(self) -> bool:
        """Flip the microphone. Returns False if nothing changed."""
        if self.state != CallState.IN_CALL:
            return False
        muted = not self.session.muted
        try:
            await self.transport.set_microphone_enabled(not muted)
        except TransportError as e:
            logger.error(f"Error toggling microphone: {e}")
            return False
        self.session.muted = muted
        return True

    def disconnect(self) -> bool:
        """End the call and open the feedback form.

        Only acts while in call; the auto-expire timer and the hang-up
        button race for this, and whichever comes second is a no-op.
        """
        if self.state != CallState.IN_CALL:
            return False

        self._stop_call_timers()
        self.transport.events.release_all(self._transport_handles)
        self.remote_audio.clear()
        self.session.agent_speaking = False
        self.wizard = FeedbackWizard()
        self._move(CallState.FEEDBACK_CAPTURE)
        self._teardown = asyncio.get_running_loop().create_task(self._teardown_transport())
        return True

    async def _teardown_transport(self) -> None:
        try:
            await self.transport.disconnect()
        except TransportError as e:
            logger.error(f"Error leaving room: {e}")

    async def wait_closed(self) -> None:
        """Wait for the transport teardown started by `disconnect()`."""
        if self._teardown is not None:
            await self._teardown

    def _on_track_subscribed(self, track: RemoteAudioTrack) -> None:
        self.remote_audio[track.participant_id] = track

    def _on_track_unsubscribed(self, track: RemoteAudioTrack) -> None:
        self.remote_audio.pop(track.participant_id, None)

    def _on_active_speakers_changed(self, speakers: list[SpeakerActivity]) -> None:
        self.session.agent_speaking = any(not speaker.is_local for speaker in speakers)

    def _on_transport_disconnected(self, reason=None) -> None:
        logger.info(f"Room disconnected: {reason}")
        self.disconnect()

    async def submit_feedback(self, submission: FeedbackSubmission | None = None) -> bool:
        """Send feedback and schedule the return to idle.

        Uses the wizard's answers when `submission` is omitted. A failed
        save is logged but otherwise treated like a success, only with a
        longer delay before the reset. Returns whether the save succeeded.
        """
        if self.state != CallState.FEEDBACK_CAPTURE:
            raise InvalidTransition(self.state, CallState.DONE)
        if self._submitting:
            return False
        if submission is None:
            submission = self.wizard.build()

        wizard = self.wizard
        self._submitting = True
        try:
            saved = await self._post_feedback(submission)
        finally:
            self._submitting = False

        if self.state != CallState.FEEDBACK_CAPTURE or self.wizard is not wizard:
            # skipped or restarted while the POST was in flight
            logger.info(f"Feedback answered after the form was closed ({self.state.value})")
            return saved

        if saved:
            self.session.confirmation = "Thank you for your feedback!"
            delay = self.settings.feedback_success_reset_delay
        else:
            delay = self.settings.feedback_failure_reset_delay

        self._move(CallState.DONE)
        self._reset_timer = ResetTimer(delay, self._reset, self.scheduler)
        self._reset_timer.arm()
        return saved

    async def _post_feedback(self, submission: FeedbackSubmission) -> bool:
        try:
            response = await self.http.post(
                FEEDBACK_PATH,
                json=submission.model_dump(by_alias=True),
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Error submitting feedback: {e}")
            return False
        logger.info("Feedback submitted")
        return True

    def skip_feedback(self) -> None:
        """Close the feedback form without sending anything."""
        if self.state != CallState.FEEDBACK_CAPTURE:
            raise InvalidTransition(self.state, CallState.IDLE)
        self._return_to_idle()

    async def restart(self) -> bool:
        """Start a new call straight from the feedback form or idle."""
        if self.state == CallState.FEEDBACK_CAPTURE:
            self.skip_feedback()
        return await self.connect()

    def _reset(self) -> None:
        if self.state == CallState.DONE:
            self._return_to_idle()

    def _return_to_idle(self) -> None:
        if self._reset_timer is not None:
            self._reset_timer.cancel()
            self._reset_timer = None
        self.wizard = None
        self._move(CallState.IDLE)
        self.session.clear()

    async def close(self) -> None:
        """Tear everything down, e.g. when the client exits."""
        self._closed = True
        self.disconnect()
        await self.wait_closed()
        self._stop_call_timers()
        if self._reset_timer is not None:
            self._reset_timer.cancel()
        self.transport.events.release_all(self._transport_handles)

    def _move(self, target: CallState) -> None:
        previous = self.session.move_to(target)
        logger.info(f"Call state {previous.value} -> {target.value}")
        self.events.emit(EventKind.STATE_CHANGED, previous, target)
