import logging

LOG_FORMAT = "%(levelname)s : %(asctime)s | %(name)s | %(message)s"

AUTHORIZATION_LOGGER = "pos_access.core.authorization"


def configure_logging(level: str = "INFO", debug_permissions: bool = False) -> None:
    root = logging.getLogger("pos_access")
    root.setLevel(level.upper())
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
    # Per-check decisions are only traced on request.
    logging.getLogger(AUTHORIZATION_LOGGER).setLevel(logging.DEBUG if debug_permissions else logging.NOTSET)
