"""Utility functions for loading XSD documents.

This module provides functions for loading schema text from files and URLs
with proper error handling.
"""

from pathlib import Path
from urllib.parse import urlparse

import requests

from .logging_config import get_logger

logger = get_logger(__name__)


class SchemaLoadError(Exception):
    """Custom exception for XSD loading errors."""

    pass


def is_url(location: str) -> bool:
    """Return True when the location looks like an http(s) URL."""
    parsed_url = urlparse(str(location))
    return parsed_url.scheme in ("http", "https") and bool(parsed_url.netloc)


def load_xsd_from_file(file_path: str | Path) -> tuple[str, str]:
    """Load XSD text from a local file.

    Args:
        file_path: Path to the XSD file.

    Returns:
        Tuple of (resolved location, schema text).

    Raises:
        SchemaLoadError: If the file is missing or cannot be read.
    """
    file_path = Path(file_path)
    logger.debug(f"Attempting to load XSD from file: {file_path}")

    if not file_path.exists():
        logger.error(f"File not found: {file_path}")
        raise SchemaLoadError(f"File not found: {file_path}")

    if file_path.suffix.lower() != ".xsd":
        logger.warning(f"File does not have .xsd extension: {file_path}")

    try:
        text = file_path.read_text(encoding="utf-8")
    except OSError as e:
        logger.error(f"Error reading file {file_path}: {e}", exc_info=True)
        raise SchemaLoadError(f"Error reading file {file_path}: {e}") from e

    logger.info(f"Successfully loaded XSD from {file_path}")
    return str(file_path.resolve()), text


def load_xsd_from_url(url: str, timeout: int = 30) -> tuple[str, str]:
    """Load XSD text from a URL.

    Args:
        url: URL to fetch the schema from.
        timeout: Request timeout in seconds.

    Returns:
        Tuple of (url, schema text).

    Raises:
        SchemaLoadError: If the URL is invalid or the request fails.
    """
    logger.debug(f"Attempting to load XSD from URL: {url}")

    if not is_url(url):
        logger.error(f"Invalid URL format: {url}")
        raise SchemaLoadError(f"Invalid URL: {url}")

    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.exceptions.Timeout as e:
        logger.error(f"Request timeout for URL: {url}")
        raise SchemaLoadError(f"Request timeout for URL: {url}") from e
    except requests.exceptions.ConnectionError as e:
        logger.error(f"Connection error for URL {url}: {e}")
        raise SchemaLoadError(f"Connection error for URL: {url}") from e
    except requests.exceptions.HTTPError as e:
        logger.error(f"HTTP error {e.response.status_code} for URL: {url}")
        raise SchemaLoadError(
            f"HTTP error {e.response.status_code} for URL: {url}"
        ) from e
    except requests.exceptions.RequestException as e:
        logger.error(f"Request error for URL {url}: {e}", exc_info=True)
        raise SchemaLoadError(f"Request error for URL {url}: {e}") from e

    logger.info(f"Successfully loaded XSD from {url}")
    return url, response.text


def load_xsd(
    file_path: str | Path | None = None,
    url: str | None = None,
    timeout: int = 30,
) -> tuple[str, str]:
    """Load XSD text from either a file or URL.

    Args:
        file_path: Path to local XSD file (mutually exclusive with url).
        url: URL to fetch the schema from (mutually exclusive with file_path).
        timeout: Request timeout in seconds (only used for URLs).

    Returns:
        Tuple of (location, schema text).

    Raises:
        SchemaLoadError: If neither or both parameters are provided, or loading fails.
    """
    if not file_path and not url:
        logger.error("Neither file_path nor url provided")
        raise SchemaLoadError("Either file_path or url must be provided")

    if file_path and url:
        logger.error("Both file_path and url provided")
        raise SchemaLoadError("Cannot specify both file_path and url")

    if file_path:
        return load_xsd_from_file(file_path)
    return load_xsd_from_url(url, timeout)


def load_xsd_location(location: str, timeout: int = 30) -> tuple[str, str]:
    """Load XSD text from a location that may be a path or a URL."""
    if is_url(location):
        return load_xsd_from_url(location, timeout)
    return load_xsd_from_file(location)
