import io

import pytest
import requests

from orthanc_cli.api import client as client_mod
from orthanc_cli.api.orthanc import OrthancClient
from orthanc_cli.errors import ApiError, NotFoundError
from orthanc_cli.models import EntityKind, Modality, Modification, Patient


class DummyResp:
    def __init__(self, status=200, json_data=None, content=b"", reason="OK"):
        self.status_code = status
        self.reason = reason
        self._json = json_data
        self._content = content
        self.closed = False

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self._json is None:
            raise ValueError("no JSON body")
        return self._json

    def iter_content(self, chunk_size=1):
        for i in range(0, len(self._content), chunk_size):
            yield self._content[i : i + chunk_size]

    def close(self):
        self.closed = True


class Recorder:
    """Stand-in for one ``requests`` verb that records its calls."""

    def __init__(self, resp):
        self.resp = resp
        self.calls = []

    def __call__(self, url, **kwargs):
        self.calls.append((url, kwargs))
        return self.resp


def _patch(monkeypatch, verb, resp):
    rec = Recorder(resp)
    monkeypatch.setattr(client_mod.requests, verb, rec)
    return rec


# --------------------------------------------------------------------------- #
# Low-level helpers                                                           #
# --------------------------------------------------------------------------- #
def test_build_url_single_slash():
    assert client_mod.build_url("http://h:8042/", "/patients") == "http://h:8042/patients"


def test_get_defaults(monkeypatch):
    rec = _patch(monkeypatch, "get", DummyResp(json_data=[]))
    client_mod.orthanc_get("http://h", "patients", params={"expand": ""})
    url, kwargs = rec.calls[0]
    assert url == "http://h/patients"
    assert kwargs["timeout"] == client_mod.DEFAULT_TIMEOUT
    assert kwargs["headers"] == {"Accept": "application/json"}
    assert kwargs["auth"] is None


def test_auth_and_extra_headers_forwarded(monkeypatch):
    rec = _patch(monkeypatch, "delete", DummyResp())
    client_mod.orthanc_delete(
        "http://h", "studies/s1", auth=("u", "p"), headers={"Authorization": "Bearer t"}, timeout=5
    )
    _, kwargs = rec.calls[0]
    assert kwargs["auth"] == ("u", "p")
    assert kwargs["headers"]["Authorization"] == "Bearer t"
    assert kwargs["timeout"] == 5


# --------------------------------------------------------------------------- #
# OrthancClient                                                               #
# --------------------------------------------------------------------------- #
def test_list_entities_expands(monkeypatch, patient_json):
    rec = _patch(monkeypatch, "get", DummyResp(json_data=[patient_json]))
    patients = OrthancClient("http://h", timeout=3).list_entities(EntityKind.PATIENT)
    assert patients == [Patient.from_json(patient_json)]
    url, kwargs = rec.calls[0]
    assert url == "http://h/patients"
    assert "expand" in kwargs["params"]
    assert kwargs["timeout"] == 3


def test_not_found_maps_server_body(monkeypatch):
    body = {"HttpStatus": 404, "Message": "Unknown resource", "Details": "Accessing an inexistent series"}
    _patch(monkeypatch, "get", DummyResp(404, body, reason="Not Found"))
    with pytest.raises(NotFoundError) as exc:
        OrthancClient("http://h").get_entity(EntityKind.SERIES, "missing")
    assert exc.value.error == "API error: 404 Not Found"
    assert exc.value.message == "Unknown resource"
    assert exc.value.details == "Accessing an inexistent series"
    assert exc.value.status_code == 404


def test_error_without_json_body(monkeypatch):
    _patch(monkeypatch, "post", DummyResp(500, None, reason="Internal Server Error"))
    with pytest.raises(ApiError) as exc:
        OrthancClient("http://h").echo("PACS")
    assert not isinstance(exc.value, NotFoundError)
    assert exc.value.message is None
    assert exc.value.details is None


def test_transport_failure(monkeypatch):
    def boom(url, **kwargs):
        raise requests.ConnectionError("connection refused")

    monkeypatch.setattr(client_mod.requests, "get", boom)
    with pytest.raises(ApiError) as exc:
        OrthancClient("http://h").list_modalities()
    assert exc.value.details == "connection refused"


def test_success_without_json_body(monkeypatch):
    _patch(monkeypatch, "get", DummyResp(200, None))
    with pytest.raises(ApiError) as exc:
        OrthancClient("http://h").list_entities(EntityKind.PATIENT)
    assert exc.value.message == "Invalid server response"
    assert exc.value.details == "no JSON body"


@pytest.mark.parametrize(
    "body",
    [
        [{"ID": "x", "MainDicomTags": {}}],
        {"ID": "x"},
        [None],
    ],
)
def test_malformed_study_list(monkeypatch, body):
    _patch(monkeypatch, "get", DummyResp(json_data=body))
    with pytest.raises(ApiError) as exc:
        OrthancClient("http://h").list_entities(EntityKind.STUDY)
    assert exc.value.error == "API error"
    assert exc.value.message == "Invalid server response"


def test_modalities_not_a_mapping(monkeypatch):
    _patch(monkeypatch, "get", DummyResp(json_data=["PACS"]))
    with pytest.raises(ApiError) as exc:
        OrthancClient("http://h").list_modalities()
    assert exc.value.message == "Invalid server response"


def test_interrupted_stream(monkeypatch):
    class Broken(DummyResp):
        def iter_content(self, chunk_size=1):
            yield b"PK"
            raise requests.exceptions.ChunkedEncodingError("connection reset")

    resp = Broken()
    _patch(monkeypatch, "get", resp)
    with pytest.raises(ApiError) as exc:
        OrthancClient("http://h").download(EntityKind.STUDY, "s1", io.BytesIO())
    assert exc.value.message == "Invalid server response"
    assert exc.value.details == "connection reset"
    assert resp.closed


def test_search_body(monkeypatch, study_json):
    rec = _patch(monkeypatch, "post", DummyResp(json_data=[study_json]))
    studies = OrthancClient("http://h").search(EntityKind.STUDY, {"StudyDescription": "*Brain*"})
    assert [s.id for s in studies] == ["s1"]
    url, kwargs = rec.calls[0]
    assert url == "http://h/tools/find"
    assert kwargs["json"] == {"Level": "Study", "Query": {"StudyDescription": "*Brain*"}, "Expand": True}


def test_modify_sends_payload(monkeypatch):
    result = {"ID": "new", "PatientID": "p2", "Path": "/studies/new", "Type": "Study"}
    rec = _patch(monkeypatch, "post", DummyResp(json_data=result))
    req = Modification(replace={"StudyDescription": "X"}, force=True)
    out = OrthancClient("http://h").modify(EntityKind.STUDY, "s1", req)
    assert out.id == "new"
    assert out.entity is EntityKind.STUDY
    url, kwargs = rec.calls[0]
    assert url == "http://h/studies/s1/modify"
    assert kwargs["json"] == {"Replace": {"StudyDescription": "X"}, "Force": True}


def test_anonymize_defaults_to_empty_body(monkeypatch):
    result = {"ID": "anon", "PatientID": "anon", "Path": "/patients/anon", "Type": "Patient"}
    rec = _patch(monkeypatch, "post", DummyResp(json_data=result))
    OrthancClient("http://h").anonymize(EntityKind.PATIENT, "p1", None)
    assert rec.calls[0][1]["json"] == {}


def test_anonymize_instance_streams_file(monkeypatch):
    resp = DummyResp(content=b"DICM" * 100)
    rec = _patch(monkeypatch, "post", resp)
    buf = io.BytesIO()
    OrthancClient("http://h").anonymize_instance("i1", None, buf)
    assert buf.getvalue() == b"DICM" * 100
    assert rec.calls[0][0] == "http://h/instances/i1/anonymize"
    assert rec.calls[0][1]["stream"] is True
    assert resp.closed


@pytest.mark.parametrize(
    "kind, path",
    [
        (EntityKind.PATIENT, "patients/x/archive"),
        (EntityKind.SERIES, "series/x/archive"),
        (EntityKind.INSTANCE, "instances/x/file"),
    ],
)
def test_download_endpoints(monkeypatch, kind, path):
    rec = _patch(monkeypatch, "get", DummyResp(content=b"PK"))
    buf = io.BytesIO()
    OrthancClient("http://h").download(kind, "x", buf)
    assert rec.calls[0][0] == f"http://h/{path}"
    assert buf.getvalue() == b"PK"


def test_modalities(monkeypatch, modalities_json):
    _patch(monkeypatch, "get", DummyResp(json_data=modalities_json))
    client = OrthancClient("http://h")
    assert [m.name for m in client.list_modalities()] == ["PACS", "WORKSTATION"]
    assert client.get_modality("WORKSTATION").port == 4242

    with pytest.raises(NotFoundError) as exc:
        client.get_modality("NOPE")
    assert exc.value.error == "Modality NOPE not found"


def test_put_modality(monkeypatch):
    rec = _patch(monkeypatch, "put", DummyResp(json_data={}))
    OrthancClient("http://h").put_modality(Modality("PACS", "REMOTE", "host", 104))
    url, kwargs = rec.calls[0]
    assert url == "http://h/modalities/PACS"
    assert kwargs["json"] == {"AET": "REMOTE", "Host": "host", "Port": 104}


def test_store(monkeypatch):
    body = {"RemoteAet": "REMOTE", "InstancesCount": 2, "FailedInstancesCount": 0}
    rec = _patch(monkeypatch, "post", DummyResp(json_data=body))
    result = OrthancClient("http://h").store("PACS", ("s1", "s2"))
    assert result.instances_count == 2
    assert rec.calls[0][1]["json"] == ["s1", "s2"]
