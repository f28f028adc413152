"""
Connection-settings loader for *orthanc_cli* with multi-path lookup.

Every connection parameter is resolved with the same precedence (first hit
wins):

1. Command-line flag (``--server``, ``--username`` …).
2. Environment variable (see :data:`ENV_VARS`).
3. Optional YAML settings file.
4. Built-in default (only ``timeout`` has one).

Search order for the settings file:

1. Path given via ``--settings``.
2. Path specified via the ``ORC_SETTINGS_FILE`` environment variable.
3. ``~/.config/orthanc-cli/settings.yaml``.

A settings file is a flat mapping, for example::

    server: https://pacs.example.org
    username: orthanc
    password: secret
    timeout: 30

Missing files are not an error; a malformed file is.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from types import SimpleNamespace
from typing import Any, Dict, Iterable, Optional

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from orthanc_cli.errors import CommandError, ConfigFileError

log = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 60.0

# Setting name → environment variable
ENV_VARS: Dict[str, str] = {
    "server": "ORC_ORTHANC_SERVER",
    "username": "ORC_ORTHANC_USERNAME",
    "password": "ORC_ORTHANC_PASSWORD",
    "iap_client_id": "IAP_CLIENT_ID",
    "google_application_credentials": "GOOGLE_APPLICATION_CREDENTIALS",
    "timeout": "ORC_TIMEOUT",
}

SETTING_NAMES = tuple(ENV_VARS)


# -----------------------------------------------------------------------------
# Helper functions
# -----------------------------------------------------------------------------
def _candidate_settings_paths(explicit: Optional[str]) -> Iterable[Path]:
    """Yield settings file paths in priority order, without existence checks."""
    if explicit:
        yield Path(explicit).expanduser()

    env_override = os.getenv("ORC_SETTINGS_FILE")
    if env_override:
        yield Path(env_override).expanduser()

    yield Path.home() / ".config" / "orthanc-cli" / "settings.yaml"


def _read_settings_file(path: Path) -> Dict[str, Any]:
    """Parse one settings file into a plain dictionary."""
    try:
        with path.open("r", encoding="utf-8") as stream:
            raw = YAML(typ="safe").load(stream)
    except (OSError, YAMLError) as exc:
        raise ConfigFileError(f"Could not read settings file {path}", str(exc)) from exc

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigFileError(f"Settings file {path} must contain a mapping")

    unknown = sorted(set(raw) - set(SETTING_NAMES))
    if unknown:
        log.warning("Ignoring unknown settings in %s: %s", path, ", ".join(unknown))
    return {k: v for k, v in raw.items() if k in SETTING_NAMES}


def _parse_timeout(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise CommandError(f"Invalid timeout value '{value}'", "Must be a number of seconds") from exc


# -----------------------------------------------------------------------------
# Public API
# -----------------------------------------------------------------------------
def load_settings(
    settings_path: Optional[str] = None,
    **overrides: Any,
) -> SimpleNamespace:
    """Resolve every connection setting and return them as a namespace.

    Args:
        settings_path: Optional explicit YAML settings file.
        **overrides: Values from command-line flags keyed by setting name;
            ``None`` means the flag was not given.

    Returns:
        Namespace with ``server``, ``username``, ``password``,
        ``iap_client_id``, ``google_application_credentials`` and ``timeout``
        attributes. Unset values are ``None``.

    Raises:
        ConfigFileError: When a settings file exists but cannot be parsed.
        CommandError: When the timeout is not a number.
    """
    file_cfg: Dict[str, Any] = {}
    for path in _candidate_settings_paths(settings_path):
        if path.is_file():
            file_cfg = _read_settings_file(path)
            log.debug("Loaded settings from %s", path)
            break
    else:
        log.debug("No settings file detected; relying on flags and environment")

    resolved: Dict[str, Any] = {}
    for name, env in ENV_VARS.items():
        flag_val = overrides.get(name)
        if flag_val is not None:
            resolved[name] = flag_val
        elif os.environ.get(env):
            resolved[name] = os.environ[env]
        else:
            resolved[name] = file_cfg.get(name)

    timeout = resolved["timeout"]
    resolved["timeout"] = DEFAULT_TIMEOUT if timeout in (None, "") else _parse_timeout(timeout)
    return SimpleNamespace(**resolved)


def require_server(cfg: SimpleNamespace) -> str:
    """Return the server address or fail with a command error."""
    if not cfg.server:
        raise CommandError(
            "Neither --server nor ORC_ORTHANC_SERVER are set",
            "Set the server address with --server, ORC_ORTHANC_SERVER or a settings file",
        )
    return str(cfg.server)
