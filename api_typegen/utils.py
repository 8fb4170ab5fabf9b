"""Loading OpenAPI and JSON-Schema documents from files and URLs.

Every loader returns ``(source, document)`` where ``source`` is the path or
URL the document came from, as shown in generated headers.
"""

import json
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import requests

from .logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_TIMEOUT = 30

# Top-level keys of the document shapes the type space understands.
DOCUMENT_MARKERS = ("openapi", "swagger", "components", "definitions")


class DocumentLoaderError(Exception):
    """A document could not be fetched, read or parsed."""

    pass


def _checked(data: Any, source: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        logger.error(f"Document from {source} is not a JSON object")
        raise DocumentLoaderError(f"Schema document must be a JSON object: {source}")
    if not any(marker in data for marker in DOCUMENT_MARKERS):
        logger.warning(f"{source} has no openapi, swagger, components or definitions key")
    logger.info(f"Loaded document from {source}")
    return data


def load_document_from_file(file_path: str | Path) -> tuple[str, dict[str, Any]]:
    """Read a JSON document from disk.

    Raises:
        FileNotFoundError: If the file does not exist.
        DocumentLoaderError: If it cannot be read or is not a JSON object.
    """
    path = Path(file_path)
    source = str(path)

    if not path.exists():
        logger.error(f"File not found: {path}")
        raise FileNotFoundError(f"File not found: {path}")
    if path.suffix.lower() != ".json":
        logger.warning(f"File does not have .json extension: {path}")

    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON in file {path}: {e}")
        raise DocumentLoaderError(f"Invalid JSON in file {path}: {e}") from e
    except OSError as e:
        logger.error(f"Error reading file {path}: {e}")
        raise DocumentLoaderError(f"Error reading file {path}: {e}") from e

    return source, _checked(data, source)


def load_document_from_url(url: str, timeout: int = DEFAULT_TIMEOUT) -> tuple[str, dict[str, Any]]:
    """Fetch a JSON document over HTTP(S).

    Raises:
        DocumentLoaderError: On a malformed URL, a failed request, an error
            status or a body that is not a JSON object.
    """
    parsed = urlparse(url)
    if not (parsed.scheme and parsed.netloc):
        logger.error(f"Invalid URL format: {url}")
        raise DocumentLoaderError(f"Invalid URL: {url}")

    logger.debug(f"Fetching document from {url} (timeout {timeout}s)")
    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.exceptions.Timeout as e:
        raise _request_failed(url, "Request timeout", e) from e
    except requests.exceptions.ConnectionError as e:
        raise _request_failed(url, "Connection error", e) from e
    except requests.exceptions.HTTPError as e:
        raise _request_failed(url, f"HTTP error {e.response.status_code}", e) from e
    except requests.exceptions.RequestException as e:
        raise _request_failed(url, "Request error", e) from e

    content_type = response.headers.get("content-type", "").lower()
    if "json" not in content_type and not parsed.path.endswith(".json"):
        logger.warning(f"URL {url} does not have JSON content type: {content_type}")

    try:
        data = response.json()
    except ValueError as e:
        logger.error(f"Invalid JSON response from {url}: {e}")
        raise DocumentLoaderError(f"Invalid JSON response from URL {url}: {e}") from e

    return url, _checked(data, url)


def _request_failed(url: str, reason: str, error: Exception) -> DocumentLoaderError:
    logger.error(f"{reason} for URL {url}: {error}")
    return DocumentLoaderError(f"{reason} for URL: {url}")


def load_document(
    file_path: str | Path | None = None,
    url: str | None = None,
    timeout: int = DEFAULT_TIMEOUT,
) -> tuple[str, dict[str, Any]]:
    """Load from exactly one of ``file_path`` or ``url``."""
    if bool(file_path) == bool(url):
        logger.error("Expected exactly one of file_path and url")
        raise DocumentLoaderError("Provide exactly one of file_path or url")

    if file_path:
        return load_document_from_file(file_path)
    return load_document_from_url(url, timeout)
