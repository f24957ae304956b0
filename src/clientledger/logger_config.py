import logging
import os

# Logger name
LOG_NAME = os.getenv("CLIENTLEDGER_LOGGER_NAME", "clientledger")

# Create logger
logger = logging.getLogger(LOG_NAME)
logger.setLevel(os.getenv("CLIENTLEDGER_LOG_LEVEL", "WARNING").upper())

# Log format with ISO-like timestamp including milliseconds
LOG_FORMAT = "%(asctime)s.%(msecs)03d - %(filename)s - %(funcName)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"

# Formatter
formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

# Console handler
console_handler = logging.StreamHandler()
console_handler.setFormatter(formatter)
logger.addHandler(console_handler)

# Avoid duplicate logs when imported in multiple modules
logger.propagate = False


def set_log_level(level: str) -> None:
    """Change the level of the application logger.

    Raises:
        ValueError: If the level name is not a known logging level
    """
    level_name = level.strip().upper()
    if level_name not in logging.getLevelNamesMapping():
        raise ValueError(f"Unknown log level '{level}'")
    logger.setLevel(level_name)
