"""``orthanc study`` – studies and their series."""

from __future__ import annotations

from orthanc_cli.commands._shared import children_command, entity_group
from orthanc_cli.models import EntityKind

study = entity_group(EntityKind.STUDY, "study", "Manage studies.")
children_command(study, "list-series", EntityKind.SERIES)
