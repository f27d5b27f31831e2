"""
Reference Data Sources
======================

Reading vocabulary text from local files or HTTP(S) URLs.

Failures are logged and reported as None so that a store keeps whatever
it already holds.
"""

from pathlib import Path
from typing import Optional, Union
import logging

import requests

from dvbi_core.patterns import is_http_url

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30


def read_file(path: Union[str, Path], what: str = "reference data") -> Optional[str]:
    """
    Read a UTF-8 text file.

    Args:
        path: File to read
        what: Description used in log messages

    Returns:
        File contents, or None if the file could not be read
    """
    logger.info(f"Reading {what} from {path}")
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return f.read()
    except OSError as e:
        logger.error(f"Error loading {what} from {path}: {e}")
        return None


def fetch_url(url: str, what: str = "reference data", timeout: float = DEFAULT_TIMEOUT) -> Optional[bytes]:
    """
    Retrieve a document over HTTP(S).

    Non-HTTP URLs are refused.

    Args:
        url: URL to retrieve
        what: Description used in log messages
        timeout: Request timeout in seconds

    Returns:
        Response body, or None if the retrieval was refused or failed
    """
    if not is_http_url(url):
        logger.warning(f"NOT retrieving {what} from {url}: not an HTTP(S) URL")
        return None

    logger.info(f"Retrieving {what} from {url}")
    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.exceptions.RequestException as e:
        logger.error(f"Error ({e}) retrieving {url}")
        return None
    return response.content


def read_source(file: Optional[Union[str, Path]] = None,
                url: Optional[str] = None,
                what: str = "reference data",
                timeout: float = DEFAULT_TIMEOUT) -> Optional[str]:
    """Text of a file or URL source; the file wins when both are given."""
    if file:
        return read_file(file, what)
    if url:
        content = fetch_url(url, what, timeout)
        return content.decode("utf-8", errors="replace") if content is not None else None
    return None
