"""
Download of submitted releases over HTTP.
"""

import logging
from typing import Optional

import requests

logger = logging.getLogger(__name__)


def download_release(
    url: str,
    timeout: Optional[float] = None,
    session: Optional[requests.Session] = None
) -> Optional[bytes]:
    """Download the release archive at a URL.

    A failed request is not an error here: the caller decides what to do
    when nothing could be fetched.

    Args:
        url: Source URL of the release
        timeout: Request timeout in seconds (client default if None)
        session: Existing requests session (or None for a one-off request)

    Returns:
        Response body bytes, or None if the download failed
    """
    http = session or requests
    try:
        response = http.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as e:
        logger.warning("Error downloading release from %s: %s", url, e)
        return None

    content = response.content
    logger.info("Downloaded %d bytes from %s", len(content), url)
    return content
