"""
Submission processor for the release archiving function.
Downloads a submitted release, archives it in Cloud Storage, emails the user
and records the outcome in DynamoDB.
"""

import asyncio
import json
import logging
import os
from functools import partial
from typing import Any, Callable, Dict, Optional

try:
    from archiver import SubmissionArchiver
    from config import ProcessorConfig, get_config_from_env
    from errors import EmailDeliveryError
    from fetcher import download_release
    from models import StatusRecord, SubmissionArtifact
    from notification import parse_notification, peek_identity
    from notifier import EmailNotifier, RecipientDirectory
    from recorder import StatusRecorder
except ImportError:
    # Adjust path when imported as a package
    from submission_processor.archiver import SubmissionArchiver
    from submission_processor.config import ProcessorConfig, get_config_from_env
    from submission_processor.errors import EmailDeliveryError
    from submission_processor.fetcher import download_release
    from submission_processor.models import StatusRecord, SubmissionArtifact
    from submission_processor.notification import parse_notification, peek_identity
    from submission_processor.notifier import EmailNotifier, RecipientDirectory
    from submission_processor.recorder import StatusRecorder

logger = logging.getLogger(__name__)

INVALID_RELEASE_MESSAGE = "Invalid release URL or empty release payload."


def _response(status_code: int, body: str) -> Dict[str, Any]:
    return {"statusCode": status_code, "body": body}


class SubmissionProcessor:
    """Runs one submission notification through fetch, archive, notify and record."""

    def __init__(
        self,
        config: ProcessorConfig,
        fetcher: Callable[[str], Optional[bytes]] = None,
        archiver: SubmissionArchiver = None,
        notifier: EmailNotifier = None,
        recorder: StatusRecorder = None
    ):
        """Initialize the processor.

        Collaborators that are not passed in are built from the configuration.

        Args:
            config: Processor configuration
            fetcher: Callable returning release bytes for a URL, or None
            archiver: Cloud Storage archiver
            notifier: Email notifier
            recorder: Status recorder (ignored if the profile disables recording)
        """
        config.validate()
        self.config = config
        self.profile = config.profile

        self.fetcher = fetcher or partial(download_release, timeout=config.fetch_timeout)

        self.archiver = archiver or SubmissionArchiver(
            bucket_name=config.bucket_name,
            uri_scheme=self.profile.uri_scheme,
        )

        self.notifier = notifier or EmailNotifier(
            config.smtp,
            RecipientDirectory(
                mapping=config.recipient_map,
                domain=config.recipient_domain,
                default_recipient=config.default_recipient,
            ),
        )

        self.recorder = None
        if self.profile.record_status:
            self.recorder = recorder or StatusRecorder(
                table_name=config.table_name,
                record_format=self.profile.record_format,
                region_name=config.aws_region,
            )

    async def process(self, envelope: Any) -> Dict[str, Any]:
        """Process one submission notification.

        Args:
            envelope: Notification payload as delivered to the function

        Returns:
            Response dictionary with statusCode and body
        """
        # Known before anything can fail, so a failure can always be recorded
        user_id, assignment_id = peek_identity(envelope)

        try:
            event = parse_notification(envelope, self.profile.source_url_field)
            user_id, assignment_id = event.user_id, event.assignment_id
            logger.info("Processing submission for %s/%s from %s", user_id, assignment_id, event.source_url)

            content = await asyncio.to_thread(self.fetcher, event.source_url)

            if not content:
                logger.warning("Empty or missing release for %s/%s", user_id, assignment_id)
                try:
                    await asyncio.to_thread(self.notifier.send, user_id, "Error", INVALID_RELEASE_MESSAGE)
                except EmailDeliveryError:
                    logger.exception("Could not send fetch failure email for %s/%s", user_id, assignment_id)
                return _response(500, f"Error: {INVALID_RELEASE_MESSAGE}")

            artifact = SubmissionArtifact(content)

            locator = await asyncio.to_thread(
                self.archiver.store, user_id, assignment_id, artifact.content
            )

            await asyncio.to_thread(
                self.notifier.send, user_id, "Success", f"Release stored in GCS at {locator}"
            )

            if self.recorder:
                record = StatusRecord.success(user_id, assignment_id, locator)
                await asyncio.to_thread(self.recorder.put, record)

            logger.info("Processed submission for %s/%s (%d bytes)", user_id, assignment_id, artifact.size)
            return _response(200, "Success")

        except Exception as e:
            message = str(e) or e.__class__.__name__
            logger.exception("Error processing submission for %s/%s", user_id, assignment_id)
            await self._record_failure(user_id, assignment_id, message)
            return _response(500, f"Error: {message}")

    async def _record_failure(self, user_id: str, assignment_id: str, message: str) -> None:
        if not (self.recorder and self.profile.record_failures):
            return

        try:
            record = StatusRecord.failure(user_id, assignment_id, message)
            await asyncio.to_thread(self.recorder.put, record)
        except Exception:
            logger.exception("Could not record failure for %s/%s", user_id, assignment_id)


_processor: Optional[SubmissionProcessor] = None


def get_processor() -> SubmissionProcessor:
    """Return the process-wide processor, creating it on first use."""
    global _processor
    if _processor is None:
        _processor = SubmissionProcessor(get_config_from_env())
    return _processor


def process_submission_entry(event: Any, context=None) -> Dict[str, Any]:
    """Cloud Function entry point for submission processing.

    Args:
        event: Notification payload
        context: Event context

    Returns:
        Response dictionary with statusCode and body
    """
    try:
        processor = get_processor()
    except ValueError as e:
        logger.error("Submission processor is not configured: %s", e)
        return _response(500, f"Error: {e}")

    return asyncio.run(processor.process(event))


if __name__ == "__main__":
    # For local testing
    import argparse
    import base64

    parser = argparse.ArgumentParser(description="Process a release submission")
    parser.add_argument("--user-id", required=True, help="Submitting user ID")
    parser.add_argument("--assignment-id", required=True, help="Assignment ID")
    parser.add_argument("--url", required=True, help="Release download URL")
    parser.add_argument("--profile", help="Submission profile (release, submission, notify_only)")
    parser.add_argument("--bucket", help="Target GCS bucket")
    parser.add_argument("--table", help="DynamoDB status table")

    args = parser.parse_args()

    if args.profile:
        os.environ["SUBMISSION_PROFILE"] = args.profile
    if args.bucket:
        os.environ["GCS_BUCKET_NAME"] = args.bucket
    if args.table:
        os.environ["DYNAMODB_TABLE_NAME"] = args.table

    logging.basicConfig(level=logging.INFO)

    config = get_config_from_env()

    # Create a Pub/Sub style envelope
    message = {
        "userId": args.user_id,
        "assignmentId": args.assignment_id,
        config.profile.source_url_field: args.url,
    }
    envelope = {
        "message": {"data": base64.b64encode(json.dumps(message).encode("utf-8")).decode("ascii")}
    }

    result = asyncio.run(SubmissionProcessor(config).process(envelope))

    print(f"Status: {result['statusCode']}")
    print(f"Body: {result['body']}")
