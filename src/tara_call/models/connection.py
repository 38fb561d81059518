"""Connection details data models."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ConnectionDetails(BaseModel):
    """Everything a client needs to join the agent's room."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    server_url: str = Field(..., min_length=1, description="LiveKit server URL")
    room_name: str = Field(..., min_length=1, description="Room the agent listens in")
    participant_name: str = Field(..., min_length=1, description="Identity baked into the token")
    participant_token: str = Field(..., min_length=1, description="Signed join token")
