import pytest

from orthanc_cli.columns import (
    INSTANCES_LIST,
    MODALITIES_LIST,
    PATIENTS_LIST,
    ColumnSpec,
    children_column,
    resolve_columns,
)
from orthanc_cli.errors import InvalidColumnError


def test_default_order_preserved():
    spec = ColumnSpec(
        columns=("ID", "PatientName", "PatientSex"),
        dicom_tags=("PatientName", "PatientSex"),
    )
    resolved = resolve_columns(spec, ["PatientSex", "ID"])
    assert resolved.columns == ("ID", "PatientSex")
    assert resolved.dicom_tags == ("PatientSex",)


def test_none_or_empty_returns_defaults():
    assert resolve_columns(PATIENTS_LIST, None) is PATIENTS_LIST
    assert resolve_columns(PATIENTS_LIST, []) is PATIENTS_LIST


def test_unknown_column_named_in_error():
    with pytest.raises(InvalidColumnError) as exc:
        resolve_columns(PATIENTS_LIST, ["ID", "Nope"])
    assert exc.value.column == "Nope"
    assert exc.value.error == "Command error"
    assert exc.value.message == (
        "Invalid column name: Nope. Available columns: ID, PatientID, PatientName, "
        "PatientSex, PatientBirthDate, Number of Studies"
    )


def test_non_tag_columns_have_no_tag():
    resolved = resolve_columns(INSTANCES_LIST, ["File size", "InstanceNumber", "Index in series"])
    assert resolved.columns == ("InstanceNumber", "Index in series", "File size")
    assert resolved.dicom_tags == ("InstanceNumber",)


def test_children_column_label():
    assert children_column("Studies") == "Number of Studies"
    assert children_column("Studies") in PATIENTS_LIST


def test_modality_columns():
    resolved = resolve_columns(MODALITIES_LIST, ["Port", "Name"])
    assert resolved.columns == ("Name", "Port")
    assert resolved.dicom_tags == ()
    with pytest.raises(InvalidColumnError):
        resolve_columns(MODALITIES_LIST, ["PatientID"])
