"""
Presentation helpers for CLI commands.

The ``*_table`` functions turn entities and server results into
:class:`TableData` – plain rows of strings plus an optional header – and
:func:`render_table` prints them with :mod:`tableprint`.  Keeping the
projection pure lets tests assert on rows without parsing box-drawing
characters; only :func:`render_table` touches the console.
"""

from __future__ import annotations

import io
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

import click
import tableprint as tp

from orthanc_cli.columns import (
    FILE_SIZE_COLUMN,
    ID_COLUMN,
    INDEX_COLUMN,
    ColumnSpec,
    children_column,
)
from orthanc_cli.errors import CliError
from orthanc_cli.models import (
    Entity,
    EntityKind,
    Modality,
    ModificationResult,
    StoreResult,
)

# Rendered for DICOM tags missing from an entity
ABSENT_DICOM_TAG_PLACEHOLDER = ""

# Server IDs are 44 characters; keep them on one line
ID_COLUMN_WIDTH = 44


@dataclass
class TableData:
    """Rows of display strings ready for rendering.

    Attributes:
        rows: One list of cells per table row.
        header: Column labels, or ``None`` for header-less tables.
        min_widths: Column index → minimum rendered width (presentation hint).
    """

    rows: List[List[str]] = field(default_factory=list)
    header: Optional[List[str]] = None
    min_widths: Dict[int, int] = field(default_factory=dict)

    def add_row(self, *cells: Any) -> None:
        self.rows.append([str(c) for c in cells])


# -----------------------------------------------------------------------------#
# Internal helpers                                                             #
# -----------------------------------------------------------------------------#
def _tag_value(entity: Entity, tag: str) -> str:
    value = entity.main_dicom_tag(tag)
    return ABSENT_DICOM_TAG_PLACEHOLDER if value is None else value


def _index_value(entity: Entity) -> str:
    return "" if entity.index is None else str(entity.index)


def _flag(value: Optional[bool]) -> str:
    return "" if value is None else str(value).lower()


# -----------------------------------------------------------------------------#
# Entity projections                                                           #
# -----------------------------------------------------------------------------#
def list_table(
    entities: Iterable[Entity],
    spec: ColumnSpec,
    no_header: bool = False,
) -> TableData:
    """Project entities of one kind into one row per entity.

    Columns come in this order: ``ID`` (when selected), one column per
    resolved DICOM tag, then the kind-specific extras that are selected –
    ``Index in series`` / ``File size`` for instances, ``Number of <children>``
    for the other kinds. Entity order is preserved.

    Args:
        entities: Entities sharing one kind.
        spec: Resolved column layout, see :func:`orthanc_cli.columns.resolve_columns`.
        no_header: Suppress the header row.

    Returns:
        Table rows; the ``ID`` column, when present, carries a minimum width.
    """
    table = TableData(header=None if no_header else list(spec.columns))

    for entity in entities:
        row: List[str] = []
        if ID_COLUMN in spec:
            row.append(entity.id)

        row.extend(_tag_value(entity, t) for t in spec.dicom_tags)

        if entity.kind() is EntityKind.INSTANCE:
            if INDEX_COLUMN in spec:
                row.append(_index_value(entity))
            if FILE_SIZE_COLUMN in spec:
                row.append(str(entity.size))
        elif children_column(entity.children_kind_name) in spec:
            row.append(str(entity.children_len))

        table.rows.append(row)

    # ID is always the first column when selected
    if ID_COLUMN in spec:
        table.min_widths[0] = ID_COLUMN_WIDTH
    return table


def show_table(entity: Entity, dicom_tags: Sequence[str]) -> TableData:
    """Project one entity into one ``(attribute, value)`` row per attribute.

    Every tag in *dicom_tags* yields a row even when the entity lacks it, and
    the kind-specific extras are always included.
    """
    table = TableData()
    table.add_row(ID_COLUMN, entity.id)
    if entity.parent_id is not None:
        table.add_row(f"{entity.parent_kind_name} ID", entity.parent_id)

    for tag in dicom_tags:
        table.add_row(tag, _tag_value(entity, tag))

    if entity.kind() is EntityKind.INSTANCE:
        table.add_row(INDEX_COLUMN, _index_value(entity))
        table.add_row(FILE_SIZE_COLUMN, entity.size)
    else:
        table.add_row(children_column(entity.children_kind_name), entity.children_len)
    return table


def filter_children(entities: Iterable[Entity], parent_id: str) -> List[Entity]:
    """Keep only the entities whose parent is *parent_id*."""
    return [e for e in entities if e.parent_id == parent_id]


def instance_tags_table(tags: Mapping[str, Any]) -> TableData:
    """Project an expanded tag dump into ``(code, name, value)`` rows.

    Only single-valued string tags are shown; sequences and binary values
    are skipped.
    """
    table = TableData()
    for code, entry in tags.items():
        if not isinstance(entry, Mapping):
            continue
        value = entry.get("Value")
        if isinstance(value, str):
            table.add_row(code, entry.get("Name", ""), value)
    return table


# -----------------------------------------------------------------------------#
# Modality projections                                                         #
# -----------------------------------------------------------------------------#
def _modality_cells(modality: Modality) -> Dict[str, str]:
    return {
        "Name": modality.name,
        "AET": modality.aet,
        "Host": modality.host,
        "Port": str(modality.port),
        "Manufacturer": modality.manufacturer or "",
    }


def modality_list_table(
    modalities: Iterable[Modality],
    spec: ColumnSpec,
    no_header: bool = False,
) -> TableData:
    """One row per modality, restricted to the resolved columns."""
    table = TableData(header=None if no_header else list(spec.columns))
    for modality in modalities:
        cells = _modality_cells(modality)
        table.rows.append([cells[c] for c in spec.columns])
    return table


def modality_show_table(modality: Modality) -> TableData:
    table = TableData()
    for label, value in _modality_cells(modality).items():
        table.add_row(label, value)
    if modality.allow_transcoding is not None:
        table.add_row("Transcoding", _flag(modality.allow_transcoding))
    table.add_row("C-ECHO", _flag(modality.allow_c_echo))
    table.add_row("C-FIND", _flag(modality.allow_c_find))
    table.add_row("C-GET", _flag(modality.allow_c_get))
    table.add_row("C-MOVE", _flag(modality.allow_c_move))
    table.add_row("C-STORE", _flag(modality.allow_c_store))
    table.add_row("N-ACTION", _flag(modality.allow_n_action))
    table.add_row("N-EVENT-REPORT", _flag(modality.allow_n_event_report))
    return table


def store_table(result: StoreResult) -> TableData:
    table = TableData()
    table.add_row("Remote AET", result.remote_aet)
    table.add_row("Instances sent", result.instances_count)
    table.add_row("Instances failed", result.failed_instances_count)
    return table


# -----------------------------------------------------------------------------#
# Result formatter                                                             #
# -----------------------------------------------------------------------------#
def new_entity_table(result: ModificationResult) -> TableData:
    """Report the entity created by an anonymize/modify call."""
    table = TableData()
    table.add_row(f"New {result.entity.value} ID", result.id)
    if result.entity is not EntityKind.PATIENT:
        table.add_row("Patient ID", result.patient_id)
    return table


def error_table(error: CliError) -> TableData:
    """Report any failure as ``Error`` plus optional ``Message``/``Details``."""
    table = TableData()
    table.add_row("Error", error.error)
    if error.message is not None:
        table.add_row("Message", error.message)
    if error.details is not None:
        table.add_row("Details", error.details)
    return table


# -----------------------------------------------------------------------------#
# Rendering                                                                    #
# -----------------------------------------------------------------------------#
def column_widths(table: TableData) -> List[int]:
    """Return the rendered width of every column.

    Each column is as wide as its longest cell (header included), but never
    narrower than its ``min_widths`` hint or a single character.
    """
    ncols = len(table.header) if table.header is not None else len(table.rows[0])
    widths = []
    for i in range(ncols):
        cells = [r[i] for r in table.rows if i < len(r)]
        if table.header is not None:
            cells.append(table.header[i])
        widths.append(max([1, table.min_widths.get(i, 0), *(len(c) for c in cells)]))
    return widths


def format_table(table: TableData) -> str:
    """Return the table as text; empty header-less tables render as ``""``.

    A header without rows is still closed by a bottom border, which
    ``tableprint.table`` only draws when there is data.
    """
    if not table.rows and table.header is None:
        return ""
    if table.header is not None and not table.header:
        return ""

    widths = column_widths(table)
    if not table.rows:
        ncols = len(table.header)
        lines = [
            tp.top(ncols, widths),
            tp.header(table.header, width=widths, align="left", add_hr=False),
            tp.bottom(ncols, widths),
        ]
        return "\n".join(lines) + "\n"

    buf = io.StringIO()
    tp.table(
        table.rows,
        headers=table.header,
        width=widths,
        align="left",
        out=buf,
    )
    return buf.getvalue()


def render_table(table: TableData, err: bool = False) -> None:
    """Print *table* to stdout (or stderr when *err* is ``True``)."""
    text = format_table(table)
    if text:
        click.echo(text, nl=False, err=err)
