"""\b
``orthanc modality`` – remote DICOM peers registered on the server.

C-ECHO and C-STORE are performed by the server; the commands here only ask
for them and report the outcome.
"""

from __future__ import annotations

from typing import Optional, Sequence

import click
from click import Context

from orthanc_cli.api.orthanc import OrthancClient
from orthanc_cli.commands._shared import (
    columns_option,
    emit,
    get_client,
    no_header_option,
)
from orthanc_cli.columns import MODALITIES_LIST, resolve_columns
from orthanc_cli.models import Modality
from orthanc_cli.utils.cli_parse import optional_list
from orthanc_cli.utils.display import (
    TableData,
    modality_list_table,
    modality_show_table,
    store_table,
)


def run_list_modalities(
    client: OrthancClient,
    columns: Optional[Sequence[str]],
    no_header: bool,
) -> TableData:
    spec = resolve_columns(MODALITIES_LIST, columns)
    return modality_list_table(client.list_modalities(), spec, no_header)


def _connection_options(func):
    shared = [
        click.argument("name"),
        click.option("-a", "--aet", required=True, help="Modality AET."),
        click.option("-h", "--host", required=True, help="Modality host."),
        click.option("-p", "--port", required=True, type=int, help="Modality port."),
    ]
    for opt in reversed(shared):
        func = opt(func)
    return func


@click.group("modality")
def modality() -> None:
    """Manage modalities."""


@modality.command("list")
@columns_option(MODALITIES_LIST)
@no_header_option
@click.pass_context
def list_modalities(ctx: Context, columns: tuple[str, ...], no_header: bool) -> None:
    """List all modalities."""
    emit(run_list_modalities(get_client(ctx), optional_list(columns), no_header))


@modality.command("show")
@click.argument("name")
@click.pass_context
def show(ctx: Context, name: str) -> None:
    """Show modality details."""
    emit(modality_show_table(get_client(ctx).get_modality(name)))


@modality.command("create")
@_connection_options
@click.pass_context
def create(ctx: Context, name: str, aet: str, host: str, port: int) -> None:
    """Create a modality."""
    get_client(ctx).put_modality(Modality(name=name, aet=aet, host=host, port=port))


@modality.command("modify")
@_connection_options
@click.pass_context
def modify(ctx: Context, name: str, aet: str, host: str, port: int) -> None:
    """Modify a modality.

    The modality must already exist; use ``create`` to register a new one.
    """
    client = get_client(ctx)
    client.get_modality(name)
    client.put_modality(Modality(name=name, aet=aet, host=host, port=port))


@modality.command("echo")
@click.argument("name")
@click.pass_context
def echo(ctx: Context, name: str) -> None:
    """Send a C-ECHO request to a modality."""
    get_client(ctx).echo(name)


@modality.command("store")
@click.argument("name")
@click.option(
    "-e",
    "--entity-ids",
    "ids",
    multiple=True,
    required=True,
    metavar="ID",
    help="Patient, study, series or instance ID to send (repeatable).",
)
@click.pass_context
def store(ctx: Context, name: str, ids: tuple[str, ...]) -> None:
    """Send a C-STORE request to a modality."""
    emit(store_table(get_client(ctx).store(name, ids)))


@modality.command("delete")
@click.argument("name")
@click.pass_context
def delete(ctx: Context, name: str) -> None:
    """Delete a modality."""
    get_client(ctx).delete_modality(name)
