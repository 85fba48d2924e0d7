"""
Main Cloud Function entry points for release submission processing.
"""

import logging
import os

import functions_framework
from cloudevents.http import CloudEvent
from google.cloud import logging as cloud_logging

try:
    from processor import process_submission_entry
except ImportError:
    # Adjust path when imported as a package
    from submission_processor.processor import process_submission_entry


def setup_logging() -> None:
    """Send logs to Cloud Logging when deployed, to stderr otherwise."""
    level = os.environ.get("LOG_LEVEL", "INFO").upper()
    on_gcp = bool(os.environ.get("K_SERVICE"))
    use_cloud = os.environ.get("LOG_TO_CLOUD", "true").lower() != "false"

    if on_gcp and use_cloud:
        cloud_logging.Client().setup_logging(log_level=getattr(logging, level, logging.INFO))
    else:
        logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


setup_logging()


@functions_framework.cloud_event
def process_submission(cloud_event: CloudEvent):
    """Pub/Sub-triggered function to archive a submitted release.

    The framework discards the return value of cloud_event handlers, so a
    500 result is still acknowledged. Only process_submission_http reports
    the status code back to a Pub/Sub push subscription.

    Args:
        cloud_event: Cloud event carrying the Pub/Sub message

    Returns:
        Response dictionary with statusCode and body
    """
    return process_submission_entry(cloud_event.data, cloud_event)


@functions_framework.http
def process_submission_http(request):
    """HTTP-triggered function for Pub/Sub push subscriptions.

    Args:
        request: HTTP request

    Returns:
        Response body and status code
    """
    request_json = request.get_json(silent=True)

    if not request_json:
        return {"statusCode": 400, "body": "Error: No JSON payload provided"}, 400

    result = process_submission_entry(request_json, None)

    return result, result["statusCode"]
