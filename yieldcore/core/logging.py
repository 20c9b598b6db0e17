import logging

from yieldcore.core.config import Settings, get_settings


LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(settings: Settings | None = None) -> None:
    """Install the engine's log format on the root logger.

    Intended for the host application's startup; importing ``yieldcore``
    never touches logging configuration.
    """
    active = settings if settings is not None else get_settings()
    level = getattr(logging, active.log_level.upper(), logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("yieldcore").setLevel(level)
