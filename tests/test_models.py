import pytest
from pydantic import ValidationError

from tara_call.models import ConnectionDetails, FeedbackSubmission


def test_connection_details_serialize_camel_case():
    details = ConnectionDetails(
        server_url="wss://example",
        room_name="tara-medical-counselor",
        participant_name="user-7",
        participant_token="token",
    )
    assert details.model_dump(by_alias=True) == {
        "serverUrl": "wss://example",
        "roomName": "tara-medical-counselor",
        "participantName": "user-7",
        "participantToken": "token",
    }


def test_connection_details_reject_empty_token():
    with pytest.raises(ValidationError):
        ConnectionDetails(server_url="wss://example", room_name="r", participant_name="p", participant_token="")


def test_submission_accepts_camel_case_payload():
    submission = FeedbackSubmission.model_validate({
        "taskCompleted": True,
        "humanScore": 4,
        "feedbackText": "Helpful",
        "timestamp": "2024-01-01T00:00:00Z",
    })
    assert submission.task_completed is True
    assert submission.human_score == 4
    assert submission.timestamp == "2024-01-01T00:00:00Z"


def test_submission_defaults_missing_timestamp():
    submission = FeedbackSubmission(taskCompleted=True, humanScore=3, feedbackText="")
    assert submission.timestamp.endswith("Z")
    assert submission.timestamp[:4].isdigit()


def test_submission_defaults_empty_timestamp():
    submission = FeedbackSubmission(taskCompleted=True, humanScore=3, feedbackText="", timestamp="")
    assert submission.timestamp.endswith("Z")


def test_submission_rejects_null_timestamp():
    """Test that an explicit null is a type error, not a missing field"""
    with pytest.raises(ValidationError):
        FeedbackSubmission.model_validate({
            "taskCompleted": True, "humanScore": 3, "feedbackText": "", "timestamp": None,
        })


def test_submission_rejects_snake_case_keys():
    with pytest.raises(ValidationError):
        FeedbackSubmission.model_validate({
            "task_completed": True, "human_score": 3, "feedback_text": "", "timestamp": "2024-01-01T00:00:00Z",
        })


@pytest.mark.parametrize("score, expected", [(5.0, 5), (1.0, 1)])
def test_submission_accepts_integral_float_score(score, expected):
    submission = FeedbackSubmission.model_validate({"taskCompleted": True, "humanScore": score, "feedbackText": ""})
    assert submission.human_score == expected
    assert isinstance(submission.human_score, int)


@pytest.mark.parametrize("score", [4.5, 6.0, 0.0])
def test_submission_rejects_fractional_or_out_of_range_float_score(score):
    with pytest.raises(ValidationError):
        FeedbackSubmission.model_validate({"taskCompleted": True, "humanScore": score, "feedbackText": ""})


def test_submission_is_immutable():
    submission = FeedbackSubmission(taskCompleted=True, humanScore=3, feedbackText="")
    with pytest.raises(ValidationError):
        submission.human_score = 1


def test_to_record_attaches_agent():
    submission = FeedbackSubmission(taskCompleted=False, humanScore=1, feedbackText="No")
    record = submission.to_record("tara")
    assert record.agent == "tara"
    assert record.task_completed is False
    assert "timestamp" not in record.model_dump()


def test_dump_by_alias_matches_wire_format():
    submission = FeedbackSubmission(taskCompleted=True, humanScore=5, feedbackText="", timestamp="2024-01-01T00:00:00Z")
    assert submission.model_dump(by_alias=True) == {
        "taskCompleted": True,
        "humanScore": 5,
        "feedbackText": "",
        "timestamp": "2024-01-01T00:00:00Z",
    }
