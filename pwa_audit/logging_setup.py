import logging

ROOT_LOGGER = "pwa_audit"

LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def resolve_level(name) -> int:
    return LEVELS.get((name or "").strip().lower(), logging.INFO)


def setup_logging(level="info") -> logging.Logger:
    """
    Console logging for the whole package. Safe to call again: only the level changes.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(resolve_level(level))

    if logger.handlers:
        return logger

    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    return logger
