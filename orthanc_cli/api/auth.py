"""
Authentication helpers for reaching an Orthanc server.

Two schemes are supported and may be combined:

* **HTTP basic auth** – used when both a username and a password are known.
* **Identity-aware proxy (IAP)** – when the server sits behind Google's IAP,
  every request needs an OIDC ID token minted for the IAP client id.  The
  token is obtained from a service-account key file with :mod:`google.auth`.

Both helpers return ``None`` when their inputs are incomplete, mirroring the
"use it only if fully configured" behaviour of the command-line flags.
"""

from __future__ import annotations

import logging
from typing import Dict, Optional, Tuple

from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request
from google.oauth2 import service_account

from orthanc_cli.errors import ApiError

log = logging.getLogger(__name__)


def basic_auth(username: Optional[str], password: Optional[str]) -> Optional[Tuple[str, str]]:
    """Return ``(username, password)`` when both are set, else ``None``."""
    if username and password:
        return username, password
    return None


def fetch_iap_token(client_id: str, credentials_file: str) -> str:
    """Mint a Google OIDC ID token whose audience is *client_id*.

    Args:
        client_id: OAuth client id of the IAP-protected resource.
        credentials_file: Path to a service-account JSON key file.

    Returns:
        The bearer token string.

    Raises:
        ApiError: When the key file is unreadable or Google refuses the
            token request.
    """
    try:
        credentials = service_account.IDTokenCredentials.from_service_account_file(
            credentials_file,
            target_audience=client_id,
        )
        credentials.refresh(Request())
    except (OSError, ValueError, GoogleAuthError) as exc:
        raise ApiError("Authentication error", "Could not obtain an IAP token", str(exc)) from exc

    log.debug("Obtained IAP token for audience %s", client_id)
    return credentials.token


def iap_headers(
    client_id: Optional[str],
    credentials_file: Optional[str],
) -> Dict[str, str]:
    """Return the ``Authorization`` header for IAP, or ``{}`` when not configured."""
    if not (client_id and credentials_file):
        return {}
    return {"Authorization": f"Bearer {fetch_iap_token(client_id, credentials_file)}"}
