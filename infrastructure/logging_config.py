import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Install the process-wide log format once at startup"""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    # passlib warns about missing bcrypt version metadata on bcrypt 4.x
    logging.getLogger("passlib").setLevel(logging.ERROR)
