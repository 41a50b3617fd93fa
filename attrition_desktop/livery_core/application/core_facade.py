import asyncio
import logging
from concurrent.futures import Future
from threading import Thread, Event
from typing import Any, Coroutine, Optional

# Setup logger for this module
logger = logging.getLogger(__name__)


class CoreFacade:
    """
    Runs the livery core's coroutines on a dedicated asyncio loop.

    The loop lives in a daemon thread so network and disk work never blocks
    the Qt GUI thread. Callers get a concurrent.futures.Future back and may
    attach done-callbacks to it.
    """

    def __init__(self):
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._thread: Optional[Thread] = None
        self._ready = Event()

    def start(self) -> None:
        if self.is_running():
            logger.warning("Attempted to start core loop while already running.")
            return

        logger.info("Starting core loop...")
        self._ready.clear()
        self._thread = Thread(target=self._run_loop, name="attrition-core", daemon=True)
        self._thread.start()
        self._ready.wait(timeout=5.0)

    def submit(self, coro: Coroutine[Any, Any, Any]) -> Future:
        if not self.is_running():
            coro.close()
            raise RuntimeError("Core loop is not running")
        return asyncio.run_coroutine_threadsafe(coro, self._loop)

    def stop(self) -> None:
        if not self.is_running():
            return

        logger.info("Stopping core loop...")
        self._loop.call_soon_threadsafe(self._loop.stop)
        self._thread.join(timeout=2.0)
        self._thread = None
        logger.info("Core loop stopped.")

    def cleanup(self) -> None:
        logger.info("Cleaning up core resources...")
        self.stop()

    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive() and self._loop is not None and self._loop.is_running()

    def _run_loop(self):
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        self._loop = loop
        loop.call_soon(self._ready.set)
        logger.info("Core loop started.")
        try:
            loop.run_forever()
        finally:
            pending = asyncio.all_tasks(loop)
            for task in pending:
                task.cancel()
            if pending:
                loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))
            loop.close()
            self._loop = None
            logger.info("Core loop exiting.")
