import logging

from pune_events.core import config

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(level=(level or config.LOG_LEVEL).upper(), format=LOG_FORMAT)
