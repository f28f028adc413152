"""
Helpers reused by the entity and modality command groups.

The four entity groups (*patient*, *study*, *series*, *instance*) expose the
same seven commands; :func:`entity_group` builds them once for a given
:class:`~orthanc_cli.models.EntityKind` and each command module only adds its
kind-specific extras (``list-studies``, ``tags`` …).

The ``run_*`` functions hold the command bodies.  They take the
:class:`~orthanc_cli.api.orthanc.OrthancClient` explicitly and return the
:class:`~orthanc_cli.utils.display.TableData` to print, which keeps them
testable without Click.
"""

from __future__ import annotations

import logging
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from types import SimpleNamespace
from typing import BinaryIO, Callable, Iterator, Optional, Sequence

import click
from click import Context

from orthanc_cli.api.auth import basic_auth, iap_headers
from orthanc_cli.api.orthanc import OrthancClient
from orthanc_cli.columns import LIST_LAYOUTS, SHOW_TAGS, ColumnSpec, resolve_columns
from orthanc_cli.config_loader import require_server
from orthanc_cli.errors import CliError
from orthanc_cli.models import EntityKind
from orthanc_cli.utils.cli_parse import optional_list, parse_tag_pairs
from orthanc_cli.utils.display import (
    TableData,
    filter_children,
    list_table,
    new_entity_table,
    render_table,
    show_table,
)
from orthanc_cli.utils.tag_config import get_anonymization_config, get_modification_config

log = logging.getLogger(__name__)


# --------------------------------------------------------------------------- #
# Client access                                                               #
# --------------------------------------------------------------------------- #
def build_client(settings: SimpleNamespace) -> OrthancClient:
    """Create an :class:`OrthancClient` from resolved connection settings."""
    server = require_server(settings)
    headers = iap_headers(settings.iap_client_id, settings.google_application_credentials)
    log.debug("Connecting to %s", server)
    return OrthancClient(
        server,
        auth=basic_auth(settings.username, settings.password),
        headers=headers,
        timeout=settings.timeout,
    )


def get_client(ctx: Context) -> OrthancClient:
    """Return the client stored on the root context, creating it on first use.

    Creation is deferred so that ``--help`` on any sub-command works without
    a configured server.
    """
    obj = ctx.find_root().obj
    if obj.client is None:
        obj.client = build_client(obj.settings)
    return obj.client


@contextmanager
def atomic_output(path: Path) -> Iterator[BinaryIO]:
    """Yield a temporary file beside *path*, moved onto *path* only on success.

    A failed download or anonymization leaves no empty or truncated file
    behind.  File-system failures are reported as :class:`CliError`.
    """
    try:
        tmp = tempfile.NamedTemporaryFile(
            dir=path.parent, prefix=f".{path.name}.", suffix=".part", delete=False
        )
    except OSError as exc:
        raise CliError(str(exc)) from exc

    try:
        with tmp:
            yield tmp
        os.replace(tmp.name, path)
    except OSError as exc:
        Path(tmp.name).unlink(missing_ok=True)
        raise CliError(str(exc)) from exc
    except BaseException:
        Path(tmp.name).unlink(missing_ok=True)
        raise


# --------------------------------------------------------------------------- #
# Shared Click options                                                        #
# --------------------------------------------------------------------------- #
def columns_option(spec: ColumnSpec) -> Callable:
    """``-c/--columns`` restricted to the labels of *spec*."""
    return click.option(
        "-c",
        "--columns",
        multiple=True,
        metavar="COLUMN",
        help=f"Column to display (repeatable). Available: {', '.join(spec.columns)}.",
    )


no_header_option = click.option(
    "-n", "--no-header", is_flag=True, help="Do not print the table header."
)

output_option = click.option(
    "-o",
    "--output",
    required=True,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output file path.",
)

query_option = click.option(
    "-q",
    "--query",
    multiple=True,
    required=True,
    metavar="TAG=VALUE",
    help="Search filter in the form TagName=TagValue (repeatable, wildcards allowed).",
)

config_option = click.option(
    "-c",
    "--config",
    "config_file",
    type=click.Path(dir_okay=False),
    help="YAML file describing the tag edits (excludes the inline options).",
)

replace_option = click.option(
    "-r",
    "--replace",
    multiple=True,
    metavar="TAG=VALUE",
    help="Replace a tag value, e.g. PatientName=Anonymous (repeatable).",
)


def anonymize_options(func: Callable) -> Callable:
    """Attach the ``anonymize`` flags to *func*."""
    shared = [
        replace_option,
        click.option("-k", "--keep", multiple=True, metavar="TAG", help="Keep a tag unchanged (repeatable)."),
        click.option("-p", "--keep-private-tags", is_flag=True, help="Keep private tags."),
        config_option,
    ]
    for opt in reversed(shared):
        func = opt(func)
    return func


def modify_options(func: Callable) -> Callable:
    """Attach the ``modify`` flags to *func*."""
    shared = [
        replace_option,
        click.option("-m", "--remove", multiple=True, metavar="TAG", help="Remove a tag (repeatable)."),
        config_option,
    ]
    for opt in reversed(shared):
        func = opt(func)
    return func


# --------------------------------------------------------------------------- #
# Command bodies                                                              #
# --------------------------------------------------------------------------- #
def run_list(
    client: OrthancClient,
    kind: EntityKind,
    columns: Optional[Sequence[str]],
    no_header: bool,
) -> TableData:
    spec = resolve_columns(LIST_LAYOUTS[kind], columns)
    return list_table(client.list_entities(kind), spec, no_header)


def run_list_children(
    client: OrthancClient,
    kind: EntityKind,
    parent_id: str,
    columns: Optional[Sequence[str]],
    no_header: bool,
) -> TableData:
    """List the entities of *kind* whose parent is *parent_id*.

    Columns are validated first, then the parent is fetched so that an
    unknown id fails with ``NotFoundError`` before the (possibly large)
    child collection is requested.
    """
    spec = resolve_columns(LIST_LAYOUTS[kind], columns)
    client.get_entity(kind.parent, parent_id)
    children = filter_children(client.list_entities(kind), parent_id)
    return list_table(children, spec, no_header)


def run_search(
    client: OrthancClient,
    kind: EntityKind,
    query: Sequence[str],
    columns: Optional[Sequence[str]],
    no_header: bool,
) -> TableData:
    spec = resolve_columns(LIST_LAYOUTS[kind], columns)
    return list_table(client.search(kind, parse_tag_pairs(query)), spec, no_header)


def run_show(client: OrthancClient, kind: EntityKind, entity_id: str) -> TableData:
    return show_table(client.get_entity(kind, entity_id), SHOW_TAGS[kind])


def run_anonymize(
    client: OrthancClient,
    kind: EntityKind,
    entity_id: str,
    replace: Sequence[str],
    keep: Sequence[str],
    keep_private_tags: bool,
    config_file: Optional[str],
    output: Optional[Path] = None,
) -> Optional[TableData]:
    """Anonymize one entity.

    Patients, studies and series produce a new entity whose id is reported.
    Instances are returned by the server as a DICOM file written to *output*;
    nothing is reported in that case.
    """
    request = get_anonymization_config(
        optional_list(replace),
        optional_list(keep),
        True if keep_private_tags else None,
        config_file,
    )
    if kind is EntityKind.INSTANCE:
        with atomic_output(output) as fh:
            client.anonymize_instance(entity_id, request, fh)
        return None
    return new_entity_table(client.anonymize(kind, entity_id, request))


def run_modify(
    client: OrthancClient,
    kind: EntityKind,
    entity_id: str,
    replace: Sequence[str],
    remove: Sequence[str],
    config_file: Optional[str],
    output: Optional[Path] = None,
) -> Optional[TableData]:
    """Modify one entity; see :func:`run_anonymize` for the instance case."""
    request = get_modification_config(optional_list(replace), optional_list(remove), config_file)
    if kind is EntityKind.INSTANCE:
        with atomic_output(output) as fh:
            client.modify_instance(entity_id, request, fh)
        return None
    return new_entity_table(client.modify(kind, entity_id, request))


def run_download(client: OrthancClient, kind: EntityKind, entity_id: str, output: Path) -> None:
    with atomic_output(output) as fh:
        client.download(kind, entity_id, fh)
    log.debug("Wrote %s %s to %s", kind.value, entity_id, output)


def emit(table: Optional[TableData]) -> None:
    if table is not None:
        render_table(table)


# --------------------------------------------------------------------------- #
# Group factory                                                               #
# --------------------------------------------------------------------------- #
def entity_group(kind: EntityKind, name: str, help_text: str) -> click.Group:
    """Build the Click group holding the commands common to every kind.

    Args:
        kind: Entity kind the commands operate on.
        name: Group name on the command line (``"patient"``, ``"study"`` …).
        help_text: One-line group description.

    Returns:
        A group with ``list``, ``show``, ``search``, ``anonymize``,
        ``modify``, ``download`` and ``delete``.
    """
    label = kind.value.lower()
    a_label = f"an {label}" if label[0] in "aeiou" else f"a {label}"
    is_instance = kind is EntityKind.INSTANCE

    @click.group(name, help=help_text)
    def group() -> None:
        pass

    @group.command("list", help=f"List all {kind.endpoint}.")
    @columns_option(LIST_LAYOUTS[kind])
    @no_header_option
    @click.pass_context
    def list_cmd(ctx: Context, columns: tuple[str, ...], no_header: bool) -> None:
        emit(run_list(get_client(ctx), kind, optional_list(columns), no_header))

    @group.command("show", help=f"Show {label} details.")
    @click.argument("entity_id", metavar="ID")
    @click.pass_context
    def show_cmd(ctx: Context, entity_id: str) -> None:
        emit(run_show(get_client(ctx), kind, entity_id))

    @group.command("search", help=f"Search for {kind.endpoint} by DICOM tag values.")
    @query_option
    @columns_option(LIST_LAYOUTS[kind])
    @no_header_option
    @click.pass_context
    def search_cmd(
        ctx: Context,
        query: tuple[str, ...],
        columns: tuple[str, ...],
        no_header: bool,
    ) -> None:
        emit(run_search(get_client(ctx), kind, query, optional_list(columns), no_header))

    def _anonymize(ctx, entity_id, replace, keep, keep_private_tags, config_file, output=None):
        emit(
            run_anonymize(
                get_client(ctx), kind, entity_id, replace, keep, keep_private_tags, config_file, output
            )
        )

    def _modify(ctx, entity_id, replace, remove, config_file, output=None):
        emit(run_modify(get_client(ctx), kind, entity_id, replace, remove, config_file, output))

    # Instances come back as a file, hence the extra --output flag
    for cmd_name, body, options, about in (
        ("anonymize", _anonymize, anonymize_options, f"Anonymize {a_label}."),
        ("modify", _modify, modify_options, f"Modify {a_label}."),
    ):
        callback = click.pass_context(body)
        if is_instance:
            callback = output_option(callback)
        callback = options(callback)
        callback = click.argument("entity_id", metavar="ID")(callback)
        group.command(cmd_name, help=about)(callback)

    @group.command("download", help=f"Download {a_label}.")
    @click.argument("entity_id", metavar="ID")
    @output_option
    @click.pass_context
    def download_cmd(ctx: Context, entity_id: str, output: Path) -> None:
        run_download(get_client(ctx), kind, entity_id, output)

    @group.command("delete", help=f"Delete {a_label}.")
    @click.argument("entity_id", metavar="ID")
    @click.pass_context
    def delete_cmd(ctx: Context, entity_id: str) -> None:
        get_client(ctx).delete(kind, entity_id)

    return group


def children_command(group: click.Group, name: str, kind: EntityKind) -> None:
    """Add ``list-<children>`` to *group*, listing *kind* entities of one parent."""
    parent = kind.parent.value.lower()

    @group.command(name, help=f"List {kind.endpoint} of the given {parent}.")
    @click.argument("parent_id", metavar="ID")
    @columns_option(LIST_LAYOUTS[kind])
    @no_header_option
    @click.pass_context
    def children_cmd(
        ctx: Context,
        parent_id: str,
        columns: tuple[str, ...],
        no_header: bool,
    ) -> None:
        emit(run_list_children(get_client(ctx), kind, parent_id, optional_list(columns), no_header))
