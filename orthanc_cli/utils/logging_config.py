"""
Centralised logger configuration for the ``orthanc`` command.

Tables are printed on stdout and errors on stderr, so console logging stays
at ``WARNING`` unless ``--verbose`` is given; with it, every REST call is
logged at ``DEBUG``.  ``urllib3`` connection chatter is kept at ``WARNING``
unless verbose output is requested.

Typical usage::

    from orthanc_cli.utils.logging_config import setup_logging

    setup_logging(verbose=verbose)
"""

from __future__ import annotations

import logging

__all__ = ["setup_logging"]

LOG_FORMAT = "%(levelname)s: %(message)s"


def setup_logging(verbose: bool = False) -> None:
    """Initialise the root logger and tame noisy third-party libraries.

    Calling the function twice does not add a second console handler.

    Args:
        verbose: When *True*, emit DEBUG-level messages to stderr; otherwise
            restrict console output to ``WARNING`` and above.
    """
    level = logging.DEBUG if verbose else logging.WARNING

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    if not any(getattr(h, "_orthanc_cli", False) for h in root_logger.handlers):
        console = logging.StreamHandler()
        console.setFormatter(logging.Formatter(LOG_FORMAT))
        console._orthanc_cli = True  # type: ignore[attr-defined]
        root_logger.addHandler(console)

    for handler in root_logger.handlers:
        if getattr(handler, "_orthanc_cli", False):
            handler.setLevel(level)

    logging.getLogger("urllib3").setLevel(logging.DEBUG if verbose else logging.WARNING)
