from __future__ import annotations
import logging

LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"

# Per-request chatter from the HTTP client and the server access log
NOISY_LOGGERS = ("urllib3", "uvicorn.access")


def _resolve_level(level: int | str) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_console_logging(
    level: int | str = logging.DEBUG,
    quiet: tuple[str, ...] = NOISY_LOGGERS,
) -> None:
    """
    Call once at process start (server or CLI).
    A second call only changes the level.
    """
    root = logging.getLogger()
    root.setLevel(_resolve_level(level))
    for name in quiet:
        logging.getLogger(name).setLevel(logging.WARNING)
    if root.handlers:
        return

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%H:%M:%S"))
    root.addHandler(handler)
