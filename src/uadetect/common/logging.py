"""Logging setup for the cron entry point."""

from __future__ import annotations

import logging

# httpx logs every request at INFO; one line per User-Agent drowns the run summary.
_CHATTY_LOGGERS = ("httpx", "httpcore", "pymemcache")


def configure_logging(*, level: int = logging.INFO, force: bool = False) -> None:
    """Initialise the root logger with a terse format suitable for cron mail.

    Third-party client loggers stay at WARNING unless ``level`` is DEBUG. Pass
    ``force=True`` to reconfigure, e.g. when ``--verbose`` is given.
    """

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
    library_level = logging.DEBUG if level <= logging.DEBUG else logging.WARNING
    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(library_level)
