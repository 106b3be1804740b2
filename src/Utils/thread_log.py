import logging
import threading

LOG_FORMAT = "%(asctime)s [%(levelname)s] [%(threadName)s] %(message)s"

logger = logging.getLogger("parallel_stemmer.items")


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, str(level).upper(), logging.INFO), format=LOG_FORMAT)


def _describe(item) -> str:
    text = getattr(item, "text", None) or getattr(item, "original", None) or str(item)
    return text if len(text) <= 60 else text[:57] + "..."


def log_start(filter_name, item):
    if logger.isEnabledFor(logging.DEBUG):
        thread_name = threading.current_thread().name
        logger.debug("[%s][%s] START %s", thread_name, filter_name, _describe(item))


def log_end(filter_name, item, status="done"):
    if logger.isEnabledFor(logging.DEBUG):
        thread_name = threading.current_thread().name
        logger.debug("[%s][%s] %s %s", thread_name, filter_name, status.upper(), _describe(item))
