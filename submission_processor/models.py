"""
Data types passed between the submission processing steps.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

UNKNOWN_ID = "unknown"
RELEASE_OBJECT_NAME = "release.zip"


class SubmissionStatus(str, Enum):
    SUCCESS = "Success"
    FAILED = "Failed"


@dataclass(frozen=True)
class SubmissionEvent:
    """A parsed submission notification."""

    user_id: str
    assignment_id: str
    source_url: str


@dataclass(frozen=True)
class SubmissionArtifact:
    """Downloaded release content, held in memory until it is archived."""

    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class StatusRecord:
    """Outcome of one invocation, written once to the status table."""

    user_id: str
    assignment_id: str
    status: SubmissionStatus
    locator: Optional[str] = None
    error_message: Optional[str] = None
    timestamp: datetime = field(default_factory=_utcnow)

    def __post_init__(self):
        if self.status == SubmissionStatus.SUCCESS:
            if not self.locator or self.error_message is not None:
                raise ValueError("A successful record needs a locator and no error message")
        elif not self.error_message or self.locator is not None:
            raise ValueError("A failed record needs an error message and no locator")

    @classmethod
    def success(cls, user_id: str, assignment_id: str, locator: str) -> "StatusRecord":
        return cls(user_id, assignment_id, SubmissionStatus.SUCCESS, locator=locator)

    @classmethod
    def failure(cls, user_id: str, assignment_id: str, error_message: str) -> "StatusRecord":
        return cls(user_id, assignment_id, SubmissionStatus.FAILED, error_message=error_message)

    @property
    def epoch_seconds(self) -> int:
        return int(self.timestamp.timestamp())
