"""Application configuration using Pydantic settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # LiveKit credentials (checked per request by the credential issuer)
    livekit_api_key: str = ""
    livekit_api_secret: str = ""
    livekit_url: str = ""

    # Supabase storage
    supabase_url: str = "http://localhost:54321"
    supabase_key: str = "anon-key-not-configured"
    feedback_table: str = "feedback"

    # Agent / room
    agent_name: str = "tara"
    agent_display_name: str = "Tara"
    room_name: str = "tara-medical-counselor"
    token_ttl_seconds: int = 15 * 60

    # Server Configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # Call client
    api_base_url: str = "http://localhost:8000"
    max_call_duration: float = 5 * 60
    feedback_success_reset_delay: float = 2.0
    feedback_failure_reset_delay: float = 4.0

    def missing_livekit_settings(self) -> list[str]:
        """Return the names of the LiveKit settings that are not set."""
        missing = []
        if not self.livekit_url:
            missing.append("livekit_url")
        if not self.livekit_api_key:
            missing.append("livekit_api_key")
        if not self.livekit_api_secret:
            missing.append("livekit_api_secret")
        return missing


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
