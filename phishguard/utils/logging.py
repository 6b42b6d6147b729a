import logging, os, sys

FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name):
    """Stdout logger for ``name``; level from LOG_LEVEL (default INFO)."""
    log = logging.getLogger(name)
    if not log.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(FORMAT))
        log.addHandler(handler)
        log.setLevel(os.getenv("LOG_LEVEL", "INFO").upper())
    return log
