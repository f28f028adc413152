"""\b
Command-line interface entry point for *orthanc_cli*.

The module:

* declares the root Click group ``orthanc`` and its connection flags;
* configures logging via :func:`orthanc_cli.utils.logging_config.setup_logging`;
* resolves connection settings (flag > environment > settings file);
* registers the entity and modality sub-command groups;
* turns every :class:`~orthanc_cli.errors.CliError` raised below it into an
  error table on stderr and exit status 1.
"""

from __future__ import annotations

import logging
from types import SimpleNamespace
from typing import Any, Dict

from orthanc_cli import __version__

import click

from orthanc_cli.commands.instance import instance as instance_cmd
from orthanc_cli.commands.modality import modality as modality_cmd
from orthanc_cli.commands.patient import patient as patient_cmd
from orthanc_cli.commands.series import series as series_cmd
from orthanc_cli.commands.study import study as study_cmd
from orthanc_cli.config_loader import load_settings
from orthanc_cli.errors import CliError
from orthanc_cli.utils.display import error_table, render_table
from orthanc_cli.utils.logging_config import setup_logging

log = logging.getLogger(__name__)


class OrthancGroup(click.Group):
    """Click group that reports :class:`CliError` as a table and exits with 1."""

    def invoke(self, ctx: click.Context) -> Any:
        try:
            return super().invoke(ctx)
        except CliError as exc:
            log.debug("Command failed: %r", exc)
            render_table(error_table(exc), err=True)
            ctx.exit(1)


_CTX: Dict[str, Any] = dict(max_content_width=120)


def _common_options(func):
    """Attach the connection flags to the root command.

    Args:
        func: Click command function that receives the additional options.

    Returns:
        Callable: The original Click command wrapped with the shared options.
    """
    shared = [
        click.option("-s", "--server", help="Orthanc server address (overrides $ORC_ORTHANC_SERVER)."),
        click.option("-u", "--username", help="Orthanc username (overrides $ORC_ORTHANC_USERNAME)."),
        click.option(
            "-p",
            "--password",
            help="Orthanc password (overrides $ORC_ORTHANC_PASSWORD).",
        ),
        click.option("--iap-client-id", help="IAP client id (overrides $IAP_CLIENT_ID)."),
        click.option(
            "--google-application-credentials",
            type=click.Path(dir_okay=False),
            help="Service-account key file for IAP (overrides $GOOGLE_APPLICATION_CREDENTIALS).",
        ),
        click.option("--timeout", type=float, help="Request timeout in seconds (overrides $ORC_TIMEOUT)."),
        click.option(
            "--settings",
            "settings_path",
            type=click.Path(dir_okay=False),
            help="YAML settings file (defaults to $ORC_SETTINGS_FILE or ~/.config/orthanc-cli/settings.yaml).",
        ),
        click.option("--verbose", is_flag=True, help="Enable debug-level logging."),
    ]
    for opt in reversed(shared):
        func = opt(func)
    return func


@click.group(cls=OrthancGroup, context_settings=_CTX)
@click.version_option(__version__)
@_common_options
@click.pass_context
def cli(  # noqa: D401 – imperative form is acceptable for CLI description
    ctx: click.Context,
    server: str | None,
    username: str | None,
    password: str | None,
    iap_client_id: str | None,
    google_application_credentials: str | None,
    timeout: float | None,
    settings_path: str | None,
    verbose: bool,
) -> None:
    """Command-line client for the Orthanc REST API.

    Args:
        ctx: Click context object provided by ``@click.pass_context``.
        server: Server address overriding environment and settings file.
        username: Basic-auth username.
        password: Basic-auth password.
        iap_client_id: OAuth client id of an identity-aware proxy.
        google_application_credentials: Service-account key used for IAP.
        timeout: Request timeout in seconds.
        settings_path: Optional explicit YAML settings file.
        verbose: Enable debug-level logging when ``True``.
    """
    # ── 1. Configure logging ──────────────────────────────────────────
    setup_logging(verbose=verbose)

    # ── 2. Resolve connection settings ───────────────────────────────
    settings = load_settings(
        settings_path,
        server=server,
        username=username,
        password=password,
        iap_client_id=iap_client_id,
        google_application_credentials=google_application_credentials,
        timeout=timeout,
    )

    # The client is built on first use, see commands._shared.get_client
    ctx.obj = SimpleNamespace(settings=settings, client=None)


cli.add_command(patient_cmd)
cli.add_command(study_cmd)
cli.add_command(series_cmd)
cli.add_command(instance_cmd)
cli.add_command(modality_cmd)

if __name__ == "__main__":
    cli()
