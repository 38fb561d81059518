"""Three-step post-call feedback wizard."""

from enum import IntEnum

from ..errors import IncompleteFeedback
from ..models.feedback import FeedbackSubmission, utc_timestamp

MIN_SCORE = 1
MAX_SCORE = 5


class WizardStep(IntEnum):
    TASK_COMPLETED = 1
    HUMAN_SCORE = 2
    FEEDBACK_TEXT = 3


class FeedbackWizard:
    """Collects feedback answers one step at a time.

    Step 1 asks whether the task was completed, step 2 asks for a 1-5
    score and step 3 takes optional free text. `build()` refuses to
    produce a submission until the first two are answered.
    """

    def __init__(self):
        self.step = WizardStep.TASK_COMPLETED
        self.task_completed: bool | None = None
        self.human_score: int | None = None
        self.feedback_text = ""

    @property
    def complete(self) -> bool:
        return self.task_completed is not None and self.human_score is not None

    def answer_task_completed(self, completed: bool) -> None:
        self.task_completed = bool(completed)
        self.step = WizardStep.HUMAN_SCORE

    def answer_human_score(self, score: int) -> None:
        if self.task_completed is None:
            raise IncompleteFeedback("Answer whether the task was completed first")
        if isinstance(score, bool) or not isinstance(score, int) or not MIN_SCORE <= score <= MAX_SCORE:
            raise ValueError(f"Score must be an integer from {MIN_SCORE} to {MAX_SCORE}, got {score!r}")
        self.human_score = score
        self.step = WizardStep.FEEDBACK_TEXT

    def set_feedback_text(self, text: str) -> None:
        self.feedback_text = text or ""

    def back(self) -> WizardStep:
        if self.step > WizardStep.TASK_COMPLETED:
            self.step = WizardStep(self.step - 1)
        return self.step

    def build(self) -> FeedbackSubmission:
        """Freeze the answers into a timestamped submission."""
        if self.task_completed is None:
            raise IncompleteFeedback("Task completion has not been answered")
        if self.human_score is None:
            raise IncompleteFeedback("Score has not been given")
        return FeedbackSubmission(
            taskCompleted=self.task_completed,
            humanScore=self.human_score,
            feedbackText=self.feedback_text,
            timestamp=utc_timestamp(),
        )
