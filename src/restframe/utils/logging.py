"""Logging setup for processes serving RestFrame applications.

Libraries never configure logging on import. Entry points, like
`blog_api.wsgi`, call `configure_logging` once at startup.
"""

import logging
import os
import sys

LEVEL_ENVIRONMENT_VARIABLE = "RESTFRAME_LOG_LEVEL"

VERBOSE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
BRIEF_FORMAT = "%(asctime)s %(levelname)s: %(message)s"

# Logger name -> level applied outside of debug mode
QUIET_LOGGERS = {
    "werkzeug": logging.WARNING,
    "restframe.core": logging.WARNING,
    "restframe.api": logging.INFO,
}


def _resolve_level(level):
    name = (level or os.environ.get(LEVEL_ENVIRONMENT_VARIABLE) or "INFO").upper()
    return getattr(logging, name, logging.INFO)


def configure_logging(level=None, format_string=None):
    """Send log records to stdout, replacing any earlier configuration.

    :param level: Name of the level, like `debug` or `WARNING`. Defaults to
        the `RESTFRAME_LOG_LEVEL` environment variable, then `INFO`.
        Unknown names fall back to `INFO`.
    :param format_string: Format of the records. Debug mode includes
        logger names by default.
    """
    numeric_level = _resolve_level(level)
    debug = numeric_level == logging.DEBUG

    logging.basicConfig(
        level=numeric_level,
        format=format_string or (VERBOSE_FORMAT if debug else BRIEF_FORMAT),
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        force=True,
    )

    if debug:
        logging.getLogger("restframe").setLevel(logging.DEBUG)
        return

    for name, quiet_level in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(quiet_level)
