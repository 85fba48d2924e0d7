"""
Cloud Storage archiving of downloaded releases.
"""

import logging
from typing import Optional

from google.cloud import storage

try:
    from errors import StorageUploadError
    from models import RELEASE_OBJECT_NAME
except ImportError:
    # Adjust path when imported as a package
    from submission_processor.errors import StorageUploadError
    from submission_processor.models import RELEASE_OBJECT_NAME

logger = logging.getLogger(__name__)

LOCATOR_PREFIXES = {
    "gs": "gs://",
    "https": "https://storage.googleapis.com/",
}


class SubmissionArchiver:
    """Stores release archives in a Cloud Storage bucket."""

    def __init__(
        self,
        bucket_name: str,
        uri_scheme: str = "gs",
        storage_client: storage.Client = None
    ):
        """Initialize the archiver.

        Args:
            bucket_name: GCS bucket that receives the releases
            uri_scheme: "gs" or "https", the form of the returned locator
            storage_client: Existing storage client (or None to create one)
        """
        if uri_scheme not in LOCATOR_PREFIXES:
            raise ValueError(f"Unsupported storage URI scheme: {uri_scheme}")

        self.bucket_name = bucket_name
        self.uri_scheme = uri_scheme
        self.storage_client = storage_client or storage.Client()

    @staticmethod
    def object_key(user_id: str, assignment_id: str) -> str:
        return f"{user_id}/{assignment_id}/{RELEASE_OBJECT_NAME}"

    def locator_for(self, key: str) -> str:
        return f"{LOCATOR_PREFIXES[self.uri_scheme]}{self.bucket_name}/{key}"

    def store(self, user_id: str, assignment_id: str, content: bytes) -> str:
        """Upload a release, replacing any earlier upload for the assignment.

        Args:
            user_id: Submitting user
            assignment_id: Assignment the release belongs to
            content: Release archive bytes

        Returns:
            Locator URI of the stored object
        """
        key = self.object_key(user_id, assignment_id)

        try:
            bucket = self.storage_client.bucket(self.bucket_name)
            blob = bucket.blob(key)
            blob.upload_from_string(content, content_type="application/zip")
        except Exception as e:
            raise StorageUploadError(
                f"Failed to upload release to gs://{self.bucket_name}/{key}: {e}"
            ) from e

        locator = self.locator_for(key)
        logger.info("Stored %d bytes at %s", len(content), locator)
        return locator
