"""CLI-parsing helpers for orthanc_cli.

This module gathers small utilities used by the Click commands so that
command modules stay focused on I/O orchestration:

* :func:`parse_tag_pairs` – ``TagName=TagValue`` tokens → mapping, shared by
  ``search --query`` and ``anonymize/modify --replace``.
* :func:`optional_list` – normalise unused repeatable options to ``None``.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from orthanc_cli.errors import MalformedPairError

__all__: list[str] = ["parse_tag_pairs", "optional_list"]


def parse_tag_pairs(tokens: Iterable[str]) -> Dict[str, str]:
    """Convert ``TagName=TagValue`` tokens into a ``{name: value}`` mapping.

    A token must split into exactly two parts on ``=``. Values containing a
    literal ``=`` are therefore rejected, as are tokens without any ``=``.
    Later tokens override earlier ones with the same name.

    Args:
        tokens: Option values exactly as Click captured them.

    Returns:
        Mapping of tag name to tag value.

    Raises:
        MalformedPairError: For the first token that is not a single pair.

    Example:
        >>> parse_tag_pairs(["PatientSex=F", "PatientName=*Sanchez*"])
        {'PatientSex': 'F', 'PatientName': '*Sanchez*'}
    """
    pairs: Dict[str, str] = {}
    for tok in tokens:
        parts = tok.split("=")
        if len(parts) != 2:
            raise MalformedPairError(tok)
        name, value = parts
        pairs[name] = value
    return pairs


def optional_list(values: Optional[Iterable[str]]) -> Optional[List[str]]:
    """Return repeated option values as a list, or ``None`` when absent.

    Click reports an unused ``multiple=True`` option as an empty tuple; the
    resolvers need ``None`` to tell an absent option from a supplied one.
    """
    if not values:
        return None
    return list(values)
