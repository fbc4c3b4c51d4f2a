import logging
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

from logitrack.config import settings

def setup_logger(level: str | None = None, log_dir: str | None = None):
    """
    Configure the "logitrack" logger once.

    - Console output always
    - Daily rotating file (7 days kept) when a log directory is configured
    """
    logger = logging.getLogger("logitrack")
    logger.setLevel((level or settings.LOG_LEVEL).upper())

    # Avoid duplicate handlers if setup_logger() is called multiple times
    if logger.handlers:
        return logger

    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    log_dir = settings.LOG_DIR if log_dir is None else log_dir
    if log_dir:
        path = Path(log_dir)
        path.mkdir(parents=True, exist_ok=True)
        file_handler = TimedRotatingFileHandler(
            filename=path / "logitrack.log",
            when="midnight",
            interval=1,
            backupCount=7,
            encoding="utf-8"
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.info("Logger initialized")
    return logger
