# --- src/beamsim_core/log_config.py ---
import logging
import sys

PACKAGE_LOGGER_NAME = "beamsim_core"


def setup_logging(level=logging.INFO):
    """ Configures the package logger to write to stdout. """
    log_formatter = logging.Formatter(
        "%(asctime)s [%(levelname)-5.5s] [%(name)s] %(message)s"
    )
    package_logger = logging.getLogger(PACKAGE_LOGGER_NAME)

    # Clear handlers from a previous call so repeated setup does not duplicate output
    for handler in package_logger.handlers[:]:
        package_logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(log_formatter)
    package_logger.setLevel(level)
    package_logger.addHandler(console_handler)
    package_logger.debug("Logging configured.")
