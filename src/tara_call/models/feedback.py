"""Post-call feedback data models."""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt, StrictStr, field_validator
from pydantic.alias_generators import to_camel


def utc_timestamp() -> str:
    """Current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class FeedbackSubmission(BaseModel):
    """Feedback collected by the three-step wizard after a call."""

    model_config = ConfigDict(alias_generator=to_camel, frozen=True)

    task_completed: StrictBool
    human_score: StrictInt = Field(..., ge=1, le=5)
    feedback_text: StrictStr
    timestamp: StrictStr = Field(default_factory=utc_timestamp)

    @field_validator("human_score", mode="before")
    @classmethod
    def integral_score(cls, value):
        """JSON numbers such as 5.0 count as the integer 5."""
        if isinstance(value, float) and value.is_integer():
            return int(value)
        return value

    @field_validator("timestamp")
    @classmethod
    def default_timestamp(cls, value: str) -> str:
        """Treat an empty timestamp like a missing one."""
        return value or utc_timestamp()

    def to_record(self, agent: str) -> "FeedbackRecord":
        """Normalize into the row layout stored in the feedback table."""
        return FeedbackRecord(
            task_completed=self.task_completed,
            human_score=self.human_score,
            feedback_text=self.feedback_text,
            agent=agent,
        )


class FeedbackRecord(BaseModel):
    """One row of the feedback table."""

    task_completed: bool
    human_score: int
    feedback_text: str
    agent: str
