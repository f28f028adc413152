"""
Light-weight HTTP helpers for interacting with the Orthanc REST API.

Only the low-level mechanics of *sending* a request belong here; no parsing
or business logic is performed.  These helpers keep URL construction,
headers, authentication and timeouts consistent in one place.

All helpers return the raw ``requests.Response`` object so that callers can
decide how to handle status codes, JSON decoding and streaming.

Functions
---------
orthanc_get
    Perform a ``GET`` request (optionally streamed).
orthanc_post
    Perform a ``POST`` request with a JSON body.
orthanc_put
    Perform a ``PUT`` request with a JSON body.
orthanc_delete
    Perform a ``DELETE`` request.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple

import requests

log = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 60.0

Auth = Optional[Tuple[str, str]]


def build_url(base_url: str, endpoint: str) -> str:
    """Join *base_url* and *endpoint* with exactly one slash."""
    return f"{base_url.rstrip('/')}/{endpoint.lstrip('/')}"


def _headers(extra: Optional[Dict[str, str]]) -> Dict[str, str]:
    headers = {"Accept": "application/json"}
    if extra:
        headers.update(extra)
    return headers


def orthanc_get(
    base_url: str,
    endpoint: str,
    *,
    auth: Auth = None,
    headers: Optional[Dict[str, str]] = None,
    params: Optional[Dict[str, Any]] = None,
    stream: bool = False,
    timeout: Optional[float] = None,
) -> requests.Response:
    """Send a GET request to the Orthanc API.

    Args:
        base_url: Root URL of the server (e.g. ``"http://localhost:8042"``).
        endpoint: Path relative to ``base_url`` (e.g. ``"patients"``).
        auth: Optional ``(username, password)`` for HTTP basic auth.
        headers: Extra headers, e.g. an ``Authorization`` bearer token.
        params: Query parameters.
        stream: Defer downloading the body (used for archives and files).
        timeout: Seconds before giving up; defaults to :data:`DEFAULT_TIMEOUT`.

    Returns:
        The raw :class:`requests.Response` object.
    """
    url = build_url(base_url, endpoint)
    log.debug("GET %s params=%s", url, params)
    return requests.get(
        url,
        auth=auth,
        headers=_headers(headers),
        params=params,
        stream=stream,
        timeout=DEFAULT_TIMEOUT if timeout is None else timeout,
    )


def orthanc_post(
    base_url: str,
    endpoint: str,
    *,
    auth: Auth = None,
    headers: Optional[Dict[str, str]] = None,
    json: Any = None,
    stream: bool = False,
    timeout: Optional[float] = None,
) -> requests.Response:
    """Send a POST request with a JSON body to the Orthanc API.

    The ``stream`` flag is used by instance anonymize/modify calls, whose
    response body is a DICOM file rather than JSON.
    """
    url = build_url(base_url, endpoint)
    log.debug("POST %s body=%s", url, json)
    return requests.post(
        url,
        auth=auth,
        headers=_headers(headers),
        json=json,
        stream=stream,
        timeout=DEFAULT_TIMEOUT if timeout is None else timeout,
    )


def orthanc_put(
    base_url: str,
    endpoint: str,
    *,
    auth: Auth = None,
    headers: Optional[Dict[str, str]] = None,
    json: Any = None,
    timeout: Optional[float] = None,
) -> requests.Response:
    """Send a PUT request with a JSON body to the Orthanc API."""
    url = build_url(base_url, endpoint)
    log.debug("PUT %s body=%s", url, json)
    return requests.put(
        url,
        auth=auth,
        headers=_headers(headers),
        json=json,
        timeout=DEFAULT_TIMEOUT if timeout is None else timeout,
    )


def orthanc_delete(
    base_url: str,
    endpoint: str,
    *,
    auth: Auth = None,
    headers: Optional[Dict[str, str]] = None,
    timeout: Optional[float] = None,
) -> requests.Response:
    """Send a DELETE request to the Orthanc API."""
    url = build_url(base_url, endpoint)
    log.debug("DELETE %s", url)
    return requests.delete(
        url,
        auth=auth,
        headers=_headers(headers),
        timeout=DEFAULT_TIMEOUT if timeout is None else timeout,
    )
