"""Ingredient Scan Service - long-running process.

Builds the scan service (vision backend, recipe provider chain, recipe
catalog, session store), starts the background session sweeper, and keeps
running until interrupted. A transport layer embeds the same service via
initialize_scan_service().

Run with: python app.py
"""

import asyncio
import signal

from src.service.service import initialize_scan_service
from src.utils.logger import logger


async def main() -> None:
    service = await initialize_scan_service()
    service.start()

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except NotImplementedError:
            # Windows event loops do not support signal handlers
            pass

    logger.info("Ingredient scan service running. Press Ctrl+C to stop.")
    try:
        await stop_event.wait()
    finally:
        logger.info("Shutting down...")
        await service.stop()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Stopped.")
    except Exception as e:
        logger.error(f"Service failed to start: {e}", exc_info=True)
        raise SystemExit(1)
