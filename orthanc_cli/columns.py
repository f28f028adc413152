"""
Column layouts for list tables and the resolver that narrows them.

Each layout pairs the ordered column labels of a list table with the ordered
DICOM tags that feed the tag-labelled columns.  The resolver is pure: layouts
are passed in explicitly, so tests never depend on module state.

Show tables use the fixed ``*_SHOW_TAGS`` listings instead; they are not
user-filterable.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Tuple

from orthanc_cli.errors import InvalidColumnError
from orthanc_cli.models import EntityKind

# Non-tag column labels
ID_COLUMN = "ID"
INDEX_COLUMN = "Index in series"
FILE_SIZE_COLUMN = "File size"


@dataclass(frozen=True, slots=True)
class ColumnSpec:
    """Ordered column labels plus the parallel DICOM tag names.

    Attributes:
        columns: Every column label in display order.
        dicom_tags: Tags shown as columns, in the same relative order as
            their labels inside *columns*.
    """

    columns: Tuple[str, ...]
    dicom_tags: Tuple[str, ...] = ()

    def __contains__(self, column: str) -> bool:
        return column in self.columns


def children_column(children_kind_name: str) -> str:
    """Label of the child-count column, e.g. ``"Number of Studies"``."""
    return f"Number of {children_kind_name}"


# --------------------------------------------------------------------------- #
# Default list layouts                                                        #
# --------------------------------------------------------------------------- #
PATIENTS_LIST = ColumnSpec(
    columns=(
        ID_COLUMN,
        "PatientID",
        "PatientName",
        "PatientSex",
        "PatientBirthDate",
        children_column("Studies"),
    ),
    dicom_tags=("PatientID", "PatientName", "PatientSex", "PatientBirthDate"),
)

STUDIES_LIST = ColumnSpec(
    columns=(
        ID_COLUMN,
        "PatientID",
        "AccessionNumber",
        "StudyInstanceUID",
        "StudyDescription",
        "StudyDate",
        "StudyTime",
        children_column("Series"),
    ),
    dicom_tags=(
        "PatientID",
        "AccessionNumber",
        "StudyInstanceUID",
        "StudyDescription",
        "StudyDate",
        "StudyTime",
    ),
)

SERIES_LIST = ColumnSpec(
    columns=(
        ID_COLUMN,
        "SeriesInstanceUID",
        "SeriesDescription",
        "Modality",
        "BodyPartExamined",
        children_column("Instances"),
    ),
    dicom_tags=("SeriesInstanceUID", "SeriesDescription", "Modality", "BodyPartExamined"),
)

INSTANCES_LIST = ColumnSpec(
    columns=(
        ID_COLUMN,
        "SOPInstanceUID",
        "InstanceCreationDate",
        "InstanceCreationTime",
        "InstanceNumber",
        INDEX_COLUMN,
        FILE_SIZE_COLUMN,
    ),
    dicom_tags=(
        "SOPInstanceUID",
        "InstanceCreationDate",
        "InstanceCreationTime",
        "InstanceNumber",
    ),
)

MODALITIES_LIST = ColumnSpec(columns=("Name", "AET", "Host", "Port", "Manufacturer"))

LIST_LAYOUTS: Dict[EntityKind, ColumnSpec] = {
    EntityKind.PATIENT: PATIENTS_LIST,
    EntityKind.STUDY: STUDIES_LIST,
    EntityKind.SERIES: SERIES_LIST,
    EntityKind.INSTANCE: INSTANCES_LIST,
}

# --------------------------------------------------------------------------- #
# Fixed show listings                                                         #
# --------------------------------------------------------------------------- #
PATIENT_SHOW_TAGS: Tuple[str, ...] = (
    "PatientID",
    "PatientName",
    "PatientSex",
    "PatientBirthDate",
    "OtherPatientIDs",
)

STUDY_SHOW_TAGS: Tuple[str, ...] = (
    "PatientID",
    "AccessionNumber",
    "StudyInstanceUID",
    "StudyDescription",
    "StudyDate",
    "StudyTime",
    "StudyID",
    "InstitutionName",
    "ReferringPhysicianName",
    "RequestingPhysician",
    "RequestedProcedureDescription",
)

SERIES_SHOW_TAGS: Tuple[str, ...] = (
    "SeriesInstanceUID",
    "SeriesDescription",
    "SeriesNumber",
    "SeriesDate",
    "SeriesTime",
    "Modality",
    "BodyPartExamined",
    "ProtocolName",
    "Manufacturer",
    "StationName",
    "OperatorsName",
)

INSTANCE_SHOW_TAGS: Tuple[str, ...] = (
    "SOPInstanceUID",
    "InstanceCreationDate",
    "InstanceCreationTime",
    "InstanceNumber",
    "ImageIndex",
    "NumberOfFrames",
    "AcquisitionNumber",
)

SHOW_TAGS: Dict[EntityKind, Tuple[str, ...]] = {
    EntityKind.PATIENT: PATIENT_SHOW_TAGS,
    EntityKind.STUDY: STUDY_SHOW_TAGS,
    EntityKind.SERIES: SERIES_SHOW_TAGS,
    EntityKind.INSTANCE: INSTANCE_SHOW_TAGS,
}


# --------------------------------------------------------------------------- #
# Resolver                                                                    #
# --------------------------------------------------------------------------- #
def check_columns(spec: ColumnSpec, requested: Iterable[str]) -> None:
    """Raise :class:`InvalidColumnError` for the first unknown column."""
    for column in requested:
        if column not in spec.columns:
            raise InvalidColumnError(column, spec.columns)


def resolve_columns(spec: ColumnSpec, requested: Optional[Iterable[str]] = None) -> ColumnSpec:
    """Narrow *spec* to the *requested* columns.

    The result keeps the default relative order of *spec*, not the order in
    which the columns were requested, so output is stable however the flags
    were written.

    Args:
        spec: Default layout for the entity kind.
        requested: Column labels chosen by the user; ``None`` or empty keeps
            the full layout.

    Returns:
        A new :class:`ColumnSpec` whose columns and tags are filtered together.

    Raises:
        InvalidColumnError: When a requested label is not part of *spec*.
    """
    if not requested:
        return spec

    wanted = list(requested)
    check_columns(spec, wanted)
    return ColumnSpec(
        columns=tuple(c for c in spec.columns if c in wanted),
        dicom_tags=tuple(t for t in spec.dicom_tags if t in wanted),
    )
