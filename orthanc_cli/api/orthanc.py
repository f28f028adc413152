"""Typed façade over the Orthanc REST API.

:class:`OrthancClient` bundles the server address, credentials and timeout
and exposes one method per REST operation the CLI needs.  Responses are
converted into the records of :mod:`orthanc_cli.models`; failures are raised
as :class:`~orthanc_cli.errors.ApiError` (``NotFoundError`` for HTTP 404)
with the server's ``Message``/``Details`` passed through verbatim.

Only Orthanc terminology is used; presentation belongs to
:mod:`orthanc_cli.utils.display`.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, BinaryIO, Callable, Dict, Iterator, List, Mapping, Optional, Sequence

import requests

from orthanc_cli.errors import ApiError, NotFoundError
from orthanc_cli.models import (
    ENTITY_TYPES,
    Anonymization,
    Entity,
    EntityKind,
    Modality,
    Modification,
    ModificationResult,
    StoreResult,
)

from .client import Auth, orthanc_delete, orthanc_get, orthanc_post, orthanc_put

log = logging.getLogger(__name__)

DOWNLOAD_CHUNK_SIZE = 64 * 1024


def _api_error(resp: requests.Response) -> ApiError:
    """Build an :class:`ApiError` from a non-2xx response.

    Orthanc reports failures as JSON such as
    ``{"HttpStatus": 404, "Message": "Unknown resource", "Details": "..."}``;
    non-JSON bodies leave ``message``/``details`` empty.
    """
    message = details = None
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, Mapping):
        message = body.get("Message")
        details = body.get("Details")

    error = f"API error: {resp.status_code} {resp.reason or ''}".rstrip()
    cls = NotFoundError if resp.status_code == 404 else ApiError
    return cls(error, message, details, status_code=resp.status_code)


def _invalid_response(exc: Exception) -> ApiError:
    return ApiError("API error", "Invalid server response", str(exc))


@contextmanager
def _parsing() -> Iterator[None]:
    """Report a 2xx body that is not the expected JSON as :class:`ApiError`."""
    try:
        yield
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        log.debug("Unexpected response body: %r", exc)
        raise _invalid_response(exc) from exc


class OrthancClient:
    """Thin, typed wrapper around the REST endpoints used by the CLI.

    Attributes:
        base_url: Server root URL without a trailing slash.
        auth: Optional ``(username, password)`` for basic auth.
        headers: Extra headers sent with every request (IAP bearer token).
        timeout: Request timeout in seconds.
    """

    def __init__(
        self,
        base_url: str,
        *,
        auth: Auth = None,
        headers: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.auth = auth
        self.headers = dict(headers or {})
        self.timeout = timeout

    # ------------------------------------------------------------------
    # Request plumbing
    # ------------------------------------------------------------------
    def _send(self, func: Callable[..., requests.Response], endpoint: str, **kwargs: Any) -> requests.Response:
        """Call one of the ``orthanc_*`` helpers and check the status."""
        try:
            resp = func(
                self.base_url,
                endpoint,
                auth=self.auth,
                headers=self.headers,
                timeout=self.timeout,
                **kwargs,
            )
        except requests.RequestException as exc:
            raise ApiError("API error", "Could not reach the server", str(exc)) from exc

        if not resp.ok:
            log.debug("%s answered %s for %s", self.base_url, resp.status_code, endpoint)
            raise _api_error(resp)
        return resp

    def _get_json(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        resp = self._send(orthanc_get, endpoint, params=params)
        with _parsing():
            return resp.json()

    def _post_json(self, endpoint: str, body: Any) -> Any:
        resp = self._send(orthanc_post, endpoint, json=body)
        with _parsing():
            return resp.json()

    @staticmethod
    def _write_body(resp: requests.Response, out: BinaryIO) -> None:
        try:
            for chunk in resp.iter_content(chunk_size=DOWNLOAD_CHUNK_SIZE):
                if chunk:
                    out.write(chunk)
        except requests.RequestException as exc:
            raise _invalid_response(exc) from exc
        finally:
            resp.close()

    # ------------------------------------------------------------------
    # Entities
    # ------------------------------------------------------------------
    def get_entity(self, kind: EntityKind, entity_id: str) -> Entity:
        """Return one entity; raise :class:`NotFoundError` when it is unknown."""
        data = self._get_json(f"{kind.endpoint}/{entity_id}")
        with _parsing():
            return ENTITY_TYPES[kind].from_json(data)

    def list_entities(self, kind: EntityKind) -> List[Entity]:
        """Return every entity of *kind*, fully expanded, in server order."""
        data = self._get_json(kind.endpoint, params={"expand": ""})
        entity_type = ENTITY_TYPES[kind]
        with _parsing():
            return [entity_type.from_json(item) for item in data]

    def search(self, kind: EntityKind, query: Mapping[str, str]) -> List[Entity]:
        """Run ``/tools/find`` at the level of *kind*; wildcards are allowed."""
        body = {"Level": kind.value, "Query": dict(query), "Expand": True}
        data = self._post_json("tools/find", body)
        entity_type = ENTITY_TYPES[kind]
        with _parsing():
            return [entity_type.from_json(item) for item in data]

    def anonymize(
        self,
        kind: EntityKind,
        entity_id: str,
        request: Optional[Anonymization] = None,
    ) -> ModificationResult:
        """Anonymize a patient, study or series into a new entity."""
        body = request.to_payload() if request is not None else {}
        data = self._post_json(f"{kind.endpoint}/{entity_id}/anonymize", body)
        with _parsing():
            return ModificationResult.from_json(data)

    def modify(self, kind: EntityKind, entity_id: str, request: Modification) -> ModificationResult:
        """Modify a patient, study or series into a new entity."""
        data = self._post_json(f"{kind.endpoint}/{entity_id}/modify", request.to_payload())
        with _parsing():
            return ModificationResult.from_json(data)

    def anonymize_instance(
        self,
        instance_id: str,
        request: Optional[Anonymization],
        out: BinaryIO,
    ) -> None:
        """Anonymize one instance; the server returns the new DICOM file."""
        body = request.to_payload() if request is not None else {}
        resp = self._send(orthanc_post, f"instances/{instance_id}/anonymize", json=body, stream=True)
        self._write_body(resp, out)

    def modify_instance(self, instance_id: str, request: Modification, out: BinaryIO) -> None:
        """Modify one instance; the server returns the new DICOM file."""
        resp = self._send(
            orthanc_post,
            f"instances/{instance_id}/modify",
            json=request.to_payload(),
            stream=True,
        )
        self._write_body(resp, out)

    def download(self, kind: EntityKind, entity_id: str, out: BinaryIO) -> None:
        """Stream a ZIP archive (or the DICOM file of an instance) into *out*."""
        suffix = "file" if kind is EntityKind.INSTANCE else "archive"
        resp = self._send(orthanc_get, f"{kind.endpoint}/{entity_id}/{suffix}", stream=True)
        self._write_body(resp, out)

    def delete(self, kind: EntityKind, entity_id: str) -> None:
        self._send(orthanc_delete, f"{kind.endpoint}/{entity_id}")

    def instance_tags(self, instance_id: str) -> Dict[str, Any]:
        """Return the expanded tag dump ``{"0010,0010": {"Name", "Type", "Value"}}``."""
        return self._get_json(f"instances/{instance_id}/tags")

    # ------------------------------------------------------------------
    # Modalities
    # ------------------------------------------------------------------
    def list_modalities(self) -> List[Modality]:
        data = self._get_json("modalities", params={"expand": ""})
        with _parsing():
            return [Modality.from_json(name, cfg) for name, cfg in data.items()]

    def get_modality(self, name: str) -> Modality:
        """Return the modality called *name*.

        Raises:
            NotFoundError: When no modality has that name.
        """
        for modality in self.list_modalities():
            if modality.name == name:
                return modality
        raise NotFoundError(f"Modality {name} not found")

    def put_modality(self, modality: Modality) -> None:
        """Create *modality*, or replace its connection settings if it exists."""
        self._send(orthanc_put, f"modalities/{modality.name}", json=modality.to_payload())

    def delete_modality(self, name: str) -> None:
        self._send(orthanc_delete, f"modalities/{name}")

    def echo(self, name: str) -> None:
        """Ask the server to C-ECHO the modality; failures raise :class:`ApiError`."""
        self._send(orthanc_post, f"modalities/{name}/echo", json={})

    def store(self, name: str, ids: Sequence[str]) -> StoreResult:
        """Ask the server to C-STORE the given entities to the modality."""
        data = self._post_json(f"modalities/{name}/store", list(ids))
        with _parsing():
            return StoreResult.from_json(data)
