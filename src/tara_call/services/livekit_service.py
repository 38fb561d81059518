"""LiveKit access-token issuing for the agent's room."""

import logging
import random
from datetime import timedelta

from livekit import api

from ..config import Settings
from ..errors import ConfigurationError
from ..models.connection import ConnectionDetails

logger = logging.getLogger(__name__)

MISSING_SETTING_MESSAGES = {
    "livekit_url": "LiveKit URL is not configured",
    "livekit_api_key": "LiveKit API key is not configured",
    "livekit_api_secret": "LiveKit API secret is not configured",
}


class LiveKitService:
    """Service for minting short-lived join tokens for a single shared room."""

    def __init__(
        self,
        server_url: str,
        api_key: str,
        api_secret: str,
        room_name: str,
        ttl_seconds: int = 15 * 60,
    ):
        self.server_url = server_url
        self.api_key = api_key
        self.api_secret = api_secret
        self.room_name = room_name
        self.ttl = timedelta(seconds=ttl_seconds)

    @classmethod
    def from_settings(cls, settings: Settings) -> "LiveKitService":
        """Build the service, refusing to do so if any LiveKit setting is absent."""
        missing = settings.missing_livekit_settings()
        if missing:
            message = MISSING_SETTING_MESSAGES[missing[0]]
            logger.error(f"{message} (missing: {', '.join(missing)})")
            raise ConfigurationError(message)

        return cls(
            server_url=settings.livekit_url,
            api_key=settings.livekit_api_key,
            api_secret=settings.livekit_api_secret,
            room_name=settings.room_name,
            ttl_seconds=settings.token_ttl_seconds,
        )

    @staticmethod
    def new_participant_identity() -> str:
        """Random identity, unique enough for a handful of concurrent callers."""
        return f"user-{random.randrange(100000)}"

    def create_token(self, identity: str) -> str:
        """Sign a join token for `identity` scoped to the configured room."""
        token = (
            api.AccessToken(self.api_key, self.api_secret)
            .with_identity(identity)
            .with_ttl(self.ttl)
            .with_grants(api.VideoGrants(
                room_join=True,
                room=self.room_name,
                can_publish=True,
                can_subscribe=True,
                can_publish_data=True,
            ))
        )
        return token.to_jwt()

    def create_connection_details(self) -> ConnectionDetails:
        """Issue a fresh identity and token for the agent's room."""
        identity = self.new_participant_identity()
        details = ConnectionDetails(
            server_url=self.server_url,
            room_name=self.room_name,
            participant_name=identity,
            participant_token=self.create_token(identity),
        )
        logger.info(
            f"Connection details generated: server={self.server_url} "
            f"room={self.room_name} participant={identity}"
        )
        return details
