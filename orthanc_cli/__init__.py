"""
Public interface for *orthanc_cli*.

The package re-exports the objects most useful to code driving an Orthanc
server without going through the command line:

* :class:`orthanc_cli.api.orthanc.OrthancClient` – typed REST client.
* :class:`orthanc_cli.models.EntityKind` – the four DICOM hierarchy levels.
* :class:`orthanc_cli.errors.CliError` – base of every reported failure.

Example::

    from orthanc_cli import EntityKind, OrthancClient

    client = OrthancClient("http://localhost:8042")
    patients = client.list_entities(EntityKind.PATIENT)
"""

from importlib.metadata import PackageNotFoundError, version

from .api.orthanc import OrthancClient
from .errors import CliError
from .models import EntityKind

try:
    __version__: str = version("orthanc-cli")
except PackageNotFoundError:
    __version__ = "0.0.0"

__all__: list[str] = ["CliError", "EntityKind", "OrthancClient", "__version__"]
