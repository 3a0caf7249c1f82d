# crawler/log.py
import logging
import os
from logging.handlers import TimedRotatingFileHandler

LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"
LOG_FILE = "parser.log"


def setup_logging(level="INFO", log_dir="logs"):
    """
    Configure root logging for a crawl run.

    Console output uses the same one-line format everywhere; a daily
    rotating file under ``log_dir`` keeps the full history of retries
    and field failures. Pass ``log_dir=None`` to log to the console only.
    Calling it again replaces the previous handlers.
    """
    formatter = logging.Formatter(LOG_FORMAT)
    handlers = [logging.StreamHandler()]
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        handlers.append(
            TimedRotatingFileHandler(
                os.path.join(log_dir, LOG_FILE),
                when="midnight",
                backupCount=14,
                encoding="utf-8",
            )
        )
    for handler in handlers:
        handler.setFormatter(formatter)
    logging.basicConfig(level=level, handlers=handlers, force=True)
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
