import logging
from rich.logging import RichHandler

def configure_logging(level: int = logging.INFO, enable_rich: bool = True) -> None:
    """
    Configure the root logger for pipeline diagnostics.
    """
    handlers = [RichHandler(rich_tracebacks=True)] if enable_rich else None
    logging.basicConfig(
        level=level,
        format="%(name)s: %(message)s" if enable_rich else "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=handlers,
    )

def get_logger(name: str) -> logging.Logger:
    """
    Return a named logger (after logging is configured).
    """
    return logging.getLogger(name)
