"""``orthanc series`` – series and their instances."""

from __future__ import annotations

from orthanc_cli.commands._shared import children_command, entity_group
from orthanc_cli.models import EntityKind

series = entity_group(EntityKind.SERIES, "series", "Manage series.")
children_command(series, "list-instances", EntityKind.INSTANCE)
