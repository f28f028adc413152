"""``orthanc patient`` – patients and their studies."""

from __future__ import annotations

from orthanc_cli.commands._shared import children_command, entity_group
from orthanc_cli.models import EntityKind

patient = entity_group(EntityKind.PATIENT, "patient", "Manage patients.")
children_command(patient, "list-studies", EntityKind.STUDY)
