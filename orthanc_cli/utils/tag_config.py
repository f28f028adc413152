"""
Resolve anonymize/modify instructions into one request object.

A tag edit can be described in exactly one of three ways:

1. inline flags (``--replace``, ``--keep``, ``--keep-private-tags`` for
   anonymize; ``--replace``, ``--remove`` for modify),
2. a YAML config file (``--config``) holding the same fields in snake_case
   (``replace``, ``keep``, ``remove``, ``keep_private_tags``, ``dicom_version``),
3. nothing at all – only valid for anonymize, where the server defaults apply.

:func:`resolve_tag_config` implements the shared rules once; the two public
wrappers only name the fields.  Every request produced here has ``force``
set, because the client never answers the server's interactive confirmation.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence, Type, TypeVar

from pydantic import BaseModel, ValidationError
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from orthanc_cli.errors import (
    ConfigFileError,
    ConflictingOptionsError,
    InsufficientOptionsError,
)
from orthanc_cli.models import Anonymization, Modification
from orthanc_cli.utils.cli_parse import parse_tag_pairs

log = logging.getLogger(__name__)

RequestT = TypeVar("RequestT", bound=BaseModel)


# -----------------------------------------------------------------------------
# Generic helpers
# -----------------------------------------------------------------------------
def load_tag_config(model: Type[RequestT], config_file: str | Path) -> RequestT:
    """Read *config_file* and validate it into *model* with ``force=True``.

    Args:
        model: Request class, :class:`Anonymization` or :class:`Modification`.
        config_file: Path to a YAML document.

    Returns:
        Validated request instance.

    Raises:
        ConfigFileError: When the file cannot be read, is not valid YAML, or
            does not match the request shape. The underlying message is kept
            verbatim.
    """
    path = Path(config_file).expanduser()
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigFileError(str(exc)) from exc

    try:
        raw = YAML(typ="safe").load(text)
    except YAMLError as exc:
        raise ConfigFileError(str(exc)) from exc

    try:
        request = model.model_validate(raw if raw is not None else {})
    except ValidationError as exc:
        raise ConfigFileError(str(exc)) from exc

    log.debug("Loaded %s config from %s", model.__name__, path)
    return request.model_copy(update={"force": True})


def resolve_tag_config(
    model: Type[RequestT],
    inline: Mapping[str, Any],
    config_file: Optional[str],
    *,
    required: bool,
) -> Optional[RequestT]:
    """Merge inline options or a config file into a single request.

    Args:
        model: Request class to build.
        inline: Inline option values keyed by model field name; ``None`` means
            the option was not given. A ``replace`` entry holds raw
            ``TagName=TagValue`` tokens.
        config_file: Optional path to a YAML config file.
        required: When ``True`` at least one source must be present.

    Returns:
        The request, or ``None`` when nothing was supplied and *required* is
        ``False``.

    Raises:
        ConflictingOptionsError: Inline options and a config file together.
        InsufficientOptionsError: Nothing supplied while *required*.
        MalformedPairError: A ``replace`` token is not ``TagName=TagValue``.
        ConfigFileError: The config file could not be loaded.
    """
    supplied = {k: v for k, v in inline.items() if v is not None}

    if supplied and config_file:
        raise ConflictingOptionsError()

    if config_file:
        return load_tag_config(model, config_file)

    if not supplied:
        if required:
            raise InsufficientOptionsError()
        return None

    if "replace" in supplied:
        supplied["replace"] = parse_tag_pairs(supplied["replace"])
    supplied["force"] = True
    return model(**supplied)


# -----------------------------------------------------------------------------
# Public API
# -----------------------------------------------------------------------------
def get_anonymization_config(
    replace: Optional[Sequence[str]] = None,
    keep: Optional[Sequence[str]] = None,
    keep_private_tags: Optional[bool] = None,
    config_file: Optional[str] = None,
) -> Optional[Anonymization]:
    """Return the anonymization request, or ``None`` for server defaults."""
    return resolve_tag_config(
        Anonymization,
        {
            "replace": replace,
            "keep": list(keep) if keep is not None else None,
            "keep_private_tags": keep_private_tags,
        },
        config_file,
        required=False,
    )


def get_modification_config(
    replace: Optional[Sequence[str]] = None,
    remove: Optional[Sequence[str]] = None,
    config_file: Optional[str] = None,
) -> Modification:
    """Return the modification request; at least one source is mandatory."""
    return resolve_tag_config(
        Modification,
        {
            "replace": replace,
            "remove": list(remove) if remove is not None else None,
        },
        config_file,
        required=True,
    )
