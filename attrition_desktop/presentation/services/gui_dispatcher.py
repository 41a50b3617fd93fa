import asyncio
from concurrent.futures import Future
from typing import Any, Callable
from PySide6.QtCore import QObject, Signal, Slot


class GuiDispatcher(QObject):
    """
    Runs callables on the GUI thread on behalf of other threads.

    Must be created on the GUI thread. Emitting from the core loop thread makes
    Qt queue the call, the result comes back through a concurrent Future.
    """

    _requested = Signal(object)

    def __init__(self, parent: QObject = None):
        super().__init__(parent)
        self._requested.connect(self._run)

    def post(self, fn: Callable[..., Any], *args: Any) -> Future:
        future: Future = Future()
        self._requested.emit((fn, args, future))
        return future

    async def call(self, fn: Callable[..., Any], *args: Any) -> Any:
        return await asyncio.wrap_future(self.post(fn, *args))

    @Slot(object)
    def _run(self, job) -> None:
        fn, args, future = job
        if not future.set_running_or_notify_cancel():
            return
        try:
            future.set_result(fn(*args))
        except Exception as e:
            future.set_exception(e)
