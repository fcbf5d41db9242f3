import sys

from loguru import logger

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)


def setup_logger(
    *,
    level: str = "INFO",
    json_logs: bool = False,
    log_file: str | None = None,
    retention: str = "7 days",
) -> None:
    """Route loguru output for the listener.

    Console sink at ``level``. When ``log_file`` is set, a rotating file sink
    records DEBUG as well, so skipped signatures stay traceable after the fact.
    """
    logger.remove()

    if json_logs:
        logger.add(sys.stdout, serialize=True, level=level.upper())
    else:
        logger.add(sys.stdout, format=CONSOLE_FORMAT, level=level.upper(), colorize=True)

    if log_file:
        logger.add(
            log_file,
            rotation="50 MB",
            retention=retention,
            compression="gz",
            level="DEBUG",
            serialize=json_logs,
        )
