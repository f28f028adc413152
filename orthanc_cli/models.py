"""
Core data-model declarations for *orthanc_cli*.

The module centralises the read-only records built from server responses and
the two request payloads the client sends:

* **Entities** – :class:`Patient`, :class:`Study`, :class:`Series` and
  :class:`Instance` share one flat base class, :class:`Entity`, whose accessors
  (tag lookup, parent link, children count, instance extras) let a single
  projector treat all four kinds alike.
* **Server results** – :class:`Modality`, :class:`ModificationResult` and
  :class:`StoreResult`.
* **Requests** – :class:`Anonymization` and :class:`Modification`, pydantic
  models that validate YAML config files and serialise to the PascalCase JSON
  bodies the REST API expects.

Every record is constructed for the duration of one command and never
mutated afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_pascal


# --------------------------------------------------------------------------- #
# Entity kinds                                                                #
# --------------------------------------------------------------------------- #
class EntityKind(str, Enum):
    """Levels of the DICOM hierarchy, root first."""

    PATIENT = "Patient"
    STUDY = "Study"
    SERIES = "Series"
    INSTANCE = "Instance"

    @property
    def endpoint(self) -> str:
        """REST collection name, e.g. ``"studies"``."""
        return _ENDPOINTS[self]

    @property
    def parent(self) -> Optional["EntityKind"]:
        """Kind one level up, ``None`` for patients."""
        return _PARENTS.get(self)


_ENDPOINTS = {
    EntityKind.PATIENT: "patients",
    EntityKind.STUDY: "studies",
    EntityKind.SERIES: "series",
    EntityKind.INSTANCE: "instances",
}

_PARENTS = {
    EntityKind.STUDY: EntityKind.PATIENT,
    EntityKind.SERIES: EntityKind.STUDY,
    EntityKind.INSTANCE: EntityKind.SERIES,
}


# --------------------------------------------------------------------------- #
# Entities                                                                    #
# --------------------------------------------------------------------------- #
@dataclass(frozen=True, slots=True)
class Entity:
    """Capability contract shared by the four record kinds.

    Subclasses only declare their own fields and override the accessors whose
    value depends on the kind. Accessors that do not apply to a kind return an
    empty value (``None``, ``0`` or an empty list) so callers never need to
    branch on the concrete class.

    Attributes:
        id: Opaque identifier assigned by the server.
        main_dicom_tags: DICOM tag name → value; absent tags are simply missing.
    """

    id: str
    main_dicom_tags: Dict[str, str]

    KIND: ClassVar[EntityKind]
    PARENT_KIND_NAME: ClassVar[Optional[str]] = None
    CHILDREN_KIND_NAME: ClassVar[Optional[str]] = None

    @classmethod
    def kind(cls) -> EntityKind:
        return cls.KIND

    def main_dicom_tag(self, name: str) -> Optional[str]:
        """Return the value of tag *name* or ``None`` when it is absent."""
        return self.main_dicom_tags.get(name)

    @property
    def parent_id(self) -> Optional[str]:
        return None

    @property
    def parent_kind_name(self) -> Optional[str]:
        return self.PARENT_KIND_NAME

    @property
    def children_kind_name(self) -> Optional[str]:
        return self.CHILDREN_KIND_NAME

    @property
    def children(self) -> List[str]:
        return []

    @property
    def children_len(self) -> int:
        return len(self.children)

    @property
    def index(self) -> Optional[int]:
        return None

    @property
    def size(self) -> int:
        return 0


def _tags(data: Mapping[str, Any], key: str = "MainDicomTags") -> Dict[str, str]:
    """Copy a tag mapping from a JSON payload, coercing values to ``str``."""
    return {k: str(v) for k, v in (data.get(key) or {}).items()}


@dataclass(frozen=True, slots=True)
class Patient(Entity):
    """Root of the hierarchy; has no parent."""

    studies: List[str] = field(default_factory=list)
    is_stable: Optional[bool] = None
    last_update: Optional[str] = None

    KIND: ClassVar[EntityKind] = EntityKind.PATIENT
    CHILDREN_KIND_NAME: ClassVar[Optional[str]] = "Studies"

    @property
    def children(self) -> List[str]:
        return self.studies

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "Patient":
        return cls(
            id=data["ID"],
            main_dicom_tags=_tags(data),
            studies=list(data.get("Studies") or []),
            is_stable=data.get("IsStable"),
            last_update=data.get("LastUpdate"),
        )


@dataclass(frozen=True, slots=True)
class Study(Entity):
    parent_patient: str = ""
    patient_main_dicom_tags: Dict[str, str] = field(default_factory=dict)
    series: List[str] = field(default_factory=list)
    is_stable: Optional[bool] = None
    last_update: Optional[str] = None

    KIND: ClassVar[EntityKind] = EntityKind.STUDY
    PARENT_KIND_NAME: ClassVar[Optional[str]] = "Patient"
    CHILDREN_KIND_NAME: ClassVar[Optional[str]] = "Series"

    @property
    def parent_id(self) -> Optional[str]:
        return self.parent_patient

    @property
    def children(self) -> List[str]:
        return self.series

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "Study":
        return cls(
            id=data["ID"],
            main_dicom_tags=_tags(data),
            parent_patient=data["ParentPatient"],
            patient_main_dicom_tags=_tags(data, "PatientMainDicomTags"),
            series=list(data.get("Series") or []),
            is_stable=data.get("IsStable"),
            last_update=data.get("LastUpdate"),
        )


@dataclass(frozen=True, slots=True)
class Series(Entity):
    parent_study: str = ""
    instances: List[str] = field(default_factory=list)
    status: Optional[str] = None
    expected_number_of_instances: Optional[int] = None
    is_stable: Optional[bool] = None
    last_update: Optional[str] = None

    KIND: ClassVar[EntityKind] = EntityKind.SERIES
    PARENT_KIND_NAME: ClassVar[Optional[str]] = "Study"
    CHILDREN_KIND_NAME: ClassVar[Optional[str]] = "Instances"

    @property
    def parent_id(self) -> Optional[str]:
        return self.parent_study

    @property
    def children(self) -> List[str]:
        return self.instances

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "Series":
        return cls(
            id=data["ID"],
            main_dicom_tags=_tags(data),
            parent_study=data["ParentStudy"],
            instances=list(data.get("Instances") or []),
            status=data.get("Status"),
            expected_number_of_instances=data.get("ExpectedNumberOfInstances"),
            is_stable=data.get("IsStable"),
            last_update=data.get("LastUpdate"),
        )


@dataclass(frozen=True, slots=True)
class Instance(Entity):
    """Leaf of the hierarchy; the only kind with an index and a file size."""

    parent_series: str = ""
    index_in_series: Optional[int] = None
    file_size: int = 0
    file_uuid: Optional[str] = None

    KIND: ClassVar[EntityKind] = EntityKind.INSTANCE
    PARENT_KIND_NAME: ClassVar[Optional[str]] = "Series"

    @property
    def parent_id(self) -> Optional[str]:
        return self.parent_series

    @property
    def index(self) -> Optional[int]:
        return self.index_in_series

    @property
    def size(self) -> int:
        return self.file_size

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "Instance":
        return cls(
            id=data["ID"],
            main_dicom_tags=_tags(data),
            parent_series=data["ParentSeries"],
            index_in_series=data.get("IndexInSeries"),
            file_size=int(data.get("FileSize") or 0),
            file_uuid=data.get("FileUuid"),
        )


ENTITY_TYPES: Dict[EntityKind, type] = {
    EntityKind.PATIENT: Patient,
    EntityKind.STUDY: Study,
    EntityKind.SERIES: Series,
    EntityKind.INSTANCE: Instance,
}


# --------------------------------------------------------------------------- #
# Server results                                                              #
# --------------------------------------------------------------------------- #
@dataclass(frozen=True, slots=True)
class Modality:
    """A DICOM peer registered on the server.

    The ``allow_*`` flags are ``None`` when the server does not report them.
    """

    name: str
    aet: str
    host: str
    port: int
    manufacturer: Optional[str] = None
    allow_transcoding: Optional[bool] = None
    allow_c_echo: Optional[bool] = None
    allow_c_find: Optional[bool] = None
    allow_c_get: Optional[bool] = None
    allow_c_move: Optional[bool] = None
    allow_c_store: Optional[bool] = None
    allow_n_action: Optional[bool] = None
    allow_n_event_report: Optional[bool] = None

    @classmethod
    def from_json(cls, name: str, data: Mapping[str, Any]) -> "Modality":
        return cls(
            name=name,
            aet=data["AET"],
            host=data["Host"],
            port=int(data["Port"]),
            manufacturer=data.get("Manufacturer"),
            allow_transcoding=data.get("AllowTranscoding"),
            allow_c_echo=data.get("AllowEcho"),
            allow_c_find=data.get("AllowFind"),
            allow_c_get=data.get("AllowGet"),
            allow_c_move=data.get("AllowMove"),
            allow_c_store=data.get("AllowStore"),
            allow_n_action=data.get("AllowNAction"),
            allow_n_event_report=data.get("AllowEventReport"),
        )

    def to_payload(self) -> Dict[str, Any]:
        """Body for ``PUT /modalities/{name}``; only connection fields are sent."""
        return {"AET": self.aet, "Host": self.host, "Port": self.port}


@dataclass(frozen=True, slots=True)
class ModificationResult:
    """Outcome of an anonymize/modify call that created a new entity."""

    id: str
    patient_id: str
    path: str
    entity: EntityKind

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "ModificationResult":
        return cls(
            id=data["ID"],
            patient_id=data.get("PatientID", ""),
            path=data.get("Path", ""),
            entity=EntityKind(data["Type"]),
        )


@dataclass(frozen=True, slots=True)
class StoreResult:
    remote_aet: str
    instances_count: int
    failed_instances_count: int

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "StoreResult":
        return cls(
            remote_aet=data.get("RemoteAet", ""),
            instances_count=int(data.get("InstancesCount", 0)),
            failed_instances_count=int(data.get("FailedInstancesCount", 0)),
        )


# --------------------------------------------------------------------------- #
# Request payloads                                                            #
# --------------------------------------------------------------------------- #
class _TagRequest(BaseModel):
    """Shared configuration for the anonymize/modify payloads.

    Field names are snake_case (as written in YAML config files); the JSON body
    sent to the server uses the PascalCase aliases. Unset fields are omitted so
    the server applies its own defaults.
    """

    model_config = ConfigDict(alias_generator=to_pascal, populate_by_name=True)

    replace: Optional[Dict[str, str]] = None
    force: Optional[bool] = None

    @field_validator("replace", mode="before")
    @classmethod
    def _stringify_values(cls, v: Any) -> Any:
        # YAML turns ``AccessionNumber: 42`` into an int; tag values are text.
        if isinstance(v, dict):
            return {str(k): "" if val is None else str(val) for k, val in v.items()}
        return v

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class Anonymization(_TagRequest):
    keep: Optional[List[str]] = None
    keep_private_tags: Optional[bool] = None
    dicom_version: Optional[str] = None


class Modification(_TagRequest):
    remove: Optional[List[str]] = None
