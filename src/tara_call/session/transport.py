"""Audio-room transport used by the session controller."""

import logging
from dataclasses import dataclass
from typing import Any, Protocol

from livekit import rtc

from ..errors import MicrophoneError, TransportError
from .events import EventBus, EventKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RemoteAudioTrack:
    """An audio track published by another participant (the agent)."""
    participant_id: str
    track_id: str
    track: Any = None


@dataclass(frozen=True)
class SpeakerActivity:
    """One entry of an active-speakers update."""
    identity: str
    is_local: bool


class Transport(Protocol):
    """What the session controller needs from a real-time audio SDK."""

    events: EventBus

    async def connect(self, url: str, token: str) -> None: ...

    async def disconnect(self) -> None: ...

    async def set_microphone_enabled(self, enabled: bool) -> None: ...


class LiveKitTransport:
    """Joins a LiveKit room and republishes its events on an EventBus.

    The microphone track is published the first time it is enabled. Audio
    frames are fed by the caller through `audio_source.capture_frame()`.
    """

    SAMPLE_RATE = 48000
    NUM_CHANNELS = 1

    def __init__(self, events: EventBus | None = None):
        self.events = events or EventBus()
        self.room: rtc.Room | None = None
        self.audio_source: rtc.AudioSource | None = None
        self.microphone_track: rtc.LocalAudioTrack | None = None
        self._room_handlers = {
            "track_subscribed": self._on_track_subscribed,
            "track_unsubscribed": self._on_track_unsubscribed,
            "active_speakers_changed": self._on_active_speakers_changed,
            "disconnected": self._on_disconnected,
        }

    async def connect(self, url: str, token: str) -> None:
        """Join the room at `url` with `token`."""
        room = rtc.Room()
        for event, handler in self._room_handlers.items():
            room.on(event, handler)

        try:
            await room.connect(url, token, options=rtc.RoomOptions(auto_subscribe=True))
        except Exception as e:
            self._detach(room)
            logger.error(f"Failed to join LiveKit room: {e}")
            raise TransportError(f"Failed to join room: {e}") from e

        self.room = room
        logger.info(f"Connected to room: {room.name}")

    async def disconnect(self) -> None:
        """Leave the room and drop the microphone track."""
        room, self.room = self.room, None
        if room is None:
            return
        self._detach(room)
        self.microphone_track = None
        self.audio_source = None
        try:
            await room.disconnect()
        except Exception as e:
            raise TransportError(f"Failed to leave room: {e}") from e
        logger.info("Disconnected from room")

    async def set_microphone_enabled(self, enabled: bool) -> None:
        """Publish, mute or unmute the local microphone track."""
        if self.room is None:
            raise TransportError("Not connected to a room")

        if self.microphone_track is None:
            if not enabled:
                return
            await self._publish_microphone()
            return

        if enabled:
            self.microphone_track.unmute()
        else:
            self.microphone_track.mute()
        logger.info("Microphone enabled" if enabled else "Microphone muted")

    async def _publish_microphone(self) -> None:
        source = rtc.AudioSource(self.SAMPLE_RATE, self.NUM_CHANNELS)
        track = rtc.LocalAudioTrack.create_audio_track("microphone", source)
        options = rtc.TrackPublishOptions()
        options.source = rtc.TrackSource.SOURCE_MICROPHONE
        try:
            await self.room.local_participant.publish_track(track, options)
        except Exception as e:
            logger.error(f"Error enabling microphone: {e}")
            raise MicrophoneError(f"Could not publish microphone: {e}") from e
        self.audio_source = source
        self.microphone_track = track
        logger.info("Microphone enabled")

    def _detach(self, room: rtc.Room) -> None:
        for event, handler in self._room_handlers.items():
            room.off(event, handler)

    def _on_track_subscribed(self, track, publication, participant) -> None:
        if track.kind != rtc.TrackKind.KIND_AUDIO:
            return
        self.events.emit(
            EventKind.TRACK_SUBSCRIBED,
            RemoteAudioTrack(participant_id=participant.sid, track_id=track.sid, track=track),
        )

    def _on_track_unsubscribed(self, track, publication, participant) -> None:
        if track.kind != rtc.TrackKind.KIND_AUDIO:
            return
        self.events.emit(
            EventKind.TRACK_UNSUBSCRIBED,
            RemoteAudioTrack(participant_id=participant.sid, track_id=track.sid, track=track),
        )

    def _on_active_speakers_changed(self, speakers) -> None:
        activity = [
            SpeakerActivity(
                identity=speaker.identity,
                is_local=isinstance(speaker, rtc.LocalParticipant),
            )
            for speaker in speakers
        ]
        self.events.emit(EventKind.ACTIVE_SPEAKERS_CHANGED, activity)

    def _on_disconnected(self, reason=None) -> None:
        self.events.emit(EventKind.DISCONNECTED, reason)

