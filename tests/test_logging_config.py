import logging

from orthanc_cli.utils.logging_config import setup_logging


def _tagged_handlers():
    return [h for h in logging.getLogger().handlers if getattr(h, "_orthanc_cli", False)]


def test_levels_follow_verbose_flag():
    setup_logging(verbose=False)
    assert logging.getLogger().level == logging.WARNING
    assert logging.getLogger("urllib3").level == logging.WARNING

    setup_logging(verbose=True)
    assert logging.getLogger().level == logging.DEBUG
    assert logging.getLogger("urllib3").level == logging.DEBUG
    assert _tagged_handlers()[0].level == logging.DEBUG


def test_handler_added_once():
    setup_logging()
    setup_logging()
    assert len(_tagged_handlers()) == 1
