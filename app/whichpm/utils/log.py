"""Logging configuration for the CLI.

Library modules only create module-level loggers; handlers are attached
here, once, by the command-line entry point.
"""

import logging

from rich.logging import RichHandler

from whichpm.utils.formatting import err_console

LOGGER_NAME = "whichpm"


def setup_logging(verbose: bool = False) -> logging.Logger:
    """Route whichpm log records to stderr through Rich.

    Args:
        verbose: Emit DEBUG records (pipeline steps); otherwise only
            warnings and errors.

    Returns:
        The configured package logger.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logger.handlers.clear()
    handler = RichHandler(
        console=err_console,
        show_time=False,
        show_path=verbose,
        markup=False,
        rich_tracebacks=verbose,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
    return logger
