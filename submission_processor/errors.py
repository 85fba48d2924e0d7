"""
Error types raised by the submission processing steps.
"""


class SubmissionError(Exception):
    """Base class for failures while processing a submission."""


class MalformedPayload(SubmissionError):
    """The notification could not be unwrapped or lacks a required field."""


class StorageUploadError(SubmissionError):
    """The release could not be written to Cloud Storage."""


class EmailDeliveryError(SubmissionError):
    """The status email could not be delivered to the relay."""


class RecordPersistError(SubmissionError):
    """The status record could not be written to the table."""
