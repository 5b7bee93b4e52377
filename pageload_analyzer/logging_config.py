"""
Logging setup shared by the CLI and the web app.
"""

import logging
import sys

LOG_FORMAT = '%(asctime)s [%(levelname)s] %(message)s'
HANDLER_NAME = 'pageload_analyzer.stderr'


def setup_logger(level=logging.INFO, name='pageload_analyzer'):
    """
    Send the package's log records to stderr.

    Calling it again only updates the level, no second handler is added.
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    if not any(h.get_name() == HANDLER_NAME for h in logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.set_name(HANDLER_NAME)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)

    return logger
