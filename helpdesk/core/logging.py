import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    # uvicorn installs its own handlers; keep its access log at the app level.
    logging.getLogger("uvicorn.access").setLevel(level.upper())
