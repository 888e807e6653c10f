from __future__ import annotations

import logging

from uadetect.common import configure_logging


def test_configure_logging_quiets_http_client_loggers() -> None:
    configure_logging(force=True)

    assert logging.getLogger().level == logging.INFO
    assert logging.getLogger("httpx").level == logging.WARNING


def test_configure_logging_verbose_enables_client_debug() -> None:
    configure_logging(level=logging.DEBUG, force=True)

    assert logging.getLogger().level == logging.DEBUG
    assert logging.getLogger("httpx").level == logging.DEBUG

    configure_logging(force=True)
