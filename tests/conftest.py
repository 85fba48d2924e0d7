import base64
import json
from unittest.mock import MagicMock

import pytest

from submission_processor.config import PROFILES, ProcessorConfig, SmtpSettings
from submission_processor.processor import SubmissionProcessor


def pubsub_envelope(message: dict) -> dict:
    data = base64.b64encode(json.dumps(message).encode("utf-8")).decode("ascii")
    return {"message": {"data": data, "messageId": "1"}, "subscription": "projects/p/subscriptions/s"}


def sns_envelope(message: dict) -> dict:
    return {"Records": [{"Sns": {"Message": json.dumps(message)}}]}


def make_config(profile: str = "release", **overrides) -> ProcessorConfig:
    values = {
        "bucket_name": "submissions",
        "table_name": "submission-status",
        "profile": PROFILES[profile],
        "smtp": SmtpSettings(username="postmaster@example.com", password="secret",
                             from_address="postmaster@example.com"),
        "default_recipient": "grader@example.com",
    }
    values.update(overrides)
    return ProcessorConfig(**values)


@pytest.fixture
def collaborators():
    fetcher = MagicMock(return_value=b"z" * 200)

    archiver = MagicMock()
    archiver.store.side_effect = lambda user_id, assignment_id, content: (
        f"gs://submissions/{user_id}/{assignment_id}/release.zip"
    )

    notifier = MagicMock()
    recorder = MagicMock()

    return {"fetcher": fetcher, "archiver": archiver, "notifier": notifier, "recorder": recorder}


@pytest.fixture
def make_processor(collaborators):
    def _make(profile: str = "release", **overrides) -> SubmissionProcessor:
        return SubmissionProcessor(make_config(profile, **overrides), **collaborators)

    return _make
