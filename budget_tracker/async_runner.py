"""
Background Event Loop

Streamlit runs every session's script in its own thread, while the ledger's
asyncio.Lock has to live on a single loop. One loop runs forever in a daemon
thread; callers from any thread submit coroutines to it and block on the
result.
"""

import asyncio
import threading
from typing import Any, Coroutine, Optional, TypeVar


T = TypeVar("T")


class BackgroundEventLoop:
    """
    An event loop owned by a dedicated thread.

    Usage:
        runner = BackgroundEventLoop().start()
        state = runner.run(ledger.load())
        runner.stop()
    """

    def __init__(self, name: str = "budget-tracker-loop"):
        self._name = name
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._thread: Optional[threading.Thread] = None
        self._lifecycle_lock = threading.Lock()

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> "BackgroundEventLoop":
        with self._lifecycle_lock:
            if not self.is_running:
                self._loop = asyncio.new_event_loop()
                self._thread = threading.Thread(
                    target=self._run_forever,
                    name=self._name,
                    daemon=True,
                )
                self._thread.start()
        return self

    def _run_forever(self) -> None:
        asyncio.set_event_loop(self._loop)
        self._loop.run_forever()

    def run(self, coro: Coroutine[Any, Any, T], timeout: Optional[float] = None) -> T:
        """
        Run a coroutine on the background loop and wait for its result.

        Safe to call from several threads at once. Exceptions raised by
        the coroutine are re-raised in the caller.

        Raises:
            RuntimeError: If called from the loop's own thread (await instead)
        """
        if threading.current_thread() is self._thread:
            coro.close()
            raise RuntimeError("run() called from the loop thread; await the coroutine instead")
        self.start()
        future = asyncio.run_coroutine_threadsafe(coro, self._loop)
        return future.result(timeout)

    def stop(self) -> None:
        """Stop the loop and wait for its thread to exit."""
        with self._lifecycle_lock:
            if not self.is_running:
                return
            self._loop.call_soon_threadsafe(self._loop.stop)
            self._thread.join()
            self._loop.close()
            self._loop = None
            self._thread = None
