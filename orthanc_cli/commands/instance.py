"""\b
``orthanc instance`` – single DICOM files.

Besides the commands shared with the other kinds, instances can dump their
full tag set.  Anonymize and modify write the new DICOM file to ``--output``
instead of reporting a new entity id.
"""

from __future__ import annotations

import click
from click import Context

from orthanc_cli.commands._shared import emit, entity_group, get_client
from orthanc_cli.models import EntityKind
from orthanc_cli.utils.display import instance_tags_table

instance = entity_group(EntityKind.INSTANCE, "instance", "Manage instances.")


@instance.command("tags")
@click.argument("instance_id", metavar="ID")
@click.pass_context
def tags(ctx: Context, instance_id: str) -> None:
    """Show all simple tags of an instance."""
    emit(instance_tags_table(get_client(ctx).instance_tags(instance_id)))
