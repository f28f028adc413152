"""Shared fixtures: sample server payloads and an isolated environment."""

import pytest

from orthanc_cli.config_loader import ENV_VARS


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Hide the developer's settings file and connection variables."""
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.delenv("ORC_SETTINGS_FILE", raising=False)
    for env in ENV_VARS.values():
        monkeypatch.delenv(env, raising=False)


@pytest.fixture
def patient_json():
    return {
        "ID": "p1",
        "Type": "Patient",
        "IsStable": True,
        "LastUpdate": "20240101T101010",
        "MainDicomTags": {"PatientID": "PID1", "PatientName": "Doe^Jane", "PatientSex": "F"},
        "Studies": ["s1", "s2"],
    }


@pytest.fixture
def study_json():
    return {
        "ID": "s1",
        "Type": "Study",
        "ParentPatient": "p1",
        "MainDicomTags": {"AccessionNumber": "ACC1", "StudyDescription": "Brain MRI"},
        "PatientMainDicomTags": {"PatientID": "PID1"},
        "Series": ["se1"],
    }


@pytest.fixture
def series_json():
    return {
        "ID": "se1",
        "Type": "Series",
        "ParentStudy": "s1",
        "Status": "Unknown",
        "ExpectedNumberOfInstances": None,
        "MainDicomTags": {"Modality": "MR", "SeriesDescription": "T1w"},
        "Instances": ["i1", "i2", "i3"],
    }


def _instance_payload(instance_id="i1", parent="se1", index=1, size=1024):
    return {
        "ID": instance_id,
        "Type": "Instance",
        "ParentSeries": parent,
        "IndexInSeries": index,
        "FileSize": size,
        "FileUuid": f"uuid-{instance_id}",
        "MainDicomTags": {"SOPInstanceUID": f"1.2.3.{instance_id}", "InstanceNumber": str(index)},
    }


@pytest.fixture
def instance_json():
    return _instance_payload()


@pytest.fixture
def modalities_json():
    return {
        "PACS": {
            "AET": "REMOTE",
            "Host": "10.0.0.5",
            "Port": 104,
            "Manufacturer": "Generic",
            "AllowEcho": True,
            "AllowFind": True,
            "AllowGet": False,
            "AllowMove": True,
            "AllowStore": True,
            "AllowNAction": False,
            "AllowEventReport": False,
            "AllowTranscoding": True,
        },
        "WORKSTATION": {"AET": "WS", "Host": "ws.local", "Port": 4242},
    }


@pytest.fixture
def make_instance():
    """Factory for instance payloads: ``make_instance("i2", parent="se9")``."""
    return _instance_payload
