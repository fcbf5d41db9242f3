"""Entry point for the Raydium LP listener."""

import asyncio
import signal
import sys

from loguru import logger

from config.settings import settings
from src.db.mongo import PoolStore, StorageUnavailableError
from src.parsers.worker import run_listener
from src.utils.logger import setup_logger


async def main() -> int:
    setup_logger(
        level=settings.log_level,
        json_logs=settings.json_logs,
        log_file=settings.log_file or None,
        retention=settings.log_retention,
    )
    logger.info("Starting Raydium LP listener...")

    store = PoolStore(
        settings.mongo_uri,
        db_name=settings.mongo_db,
        collection_name=settings.mongo_collection,
        timeout_ms=settings.mongo_timeout_ms,
    )
    try:
        await store.connect()
    except StorageUnavailableError as e:
        logger.critical(f"{e}; nothing could be persisted, exiting")
        return 1

    # Graceful shutdown on SIGINT/SIGTERM
    loop = asyncio.get_running_loop()
    shutdown_event = asyncio.Event()

    def _signal_handler() -> None:
        logger.info("Shutdown signal received")
        shutdown_event.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, _signal_handler)

    listener_task = asyncio.create_task(run_listener(store))

    # Wait for either listener to finish or shutdown signal
    done, pending = await asyncio.wait(
        [listener_task, asyncio.create_task(shutdown_event.wait())],
        return_when=asyncio.FIRST_COMPLETED,
    )

    exit_code = 0
    if listener_task in done and listener_task.exception() is not None:
        logger.error(f"Listener stopped: {listener_task.exception()}")
        exit_code = 1

    for task in pending:
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    await store.close()
    logger.info("Shutdown complete")
    return exit_code


def run() -> None:
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
