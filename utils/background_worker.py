from __future__ import annotations

import threading
from collections.abc import Callable
from typing import Any

from loguru import logger

__all__ = ["BackgroundWorker"]

Dispatcher = Callable[..., None]


def _call_directly(callback: Callable[..., Any], *args: Any) -> None:
    callback(*args)


class BackgroundWorker:
    """Run blocking work (such as loading the card inventory) in daemon threads.

    Callbacks are handed to ``dispatcher``, which by default calls them on the
    worker thread. A front end can pass its own dispatcher to move them onto
    its main thread.
    """

    def __init__(self, dispatcher: Dispatcher | None = None) -> None:
        self._stop_event = threading.Event()
        self._threads: list[threading.Thread] = []
        self._lock = threading.Lock()
        self._dispatch = dispatcher or _call_directly

    def submit(
        self,
        func: Callable[..., Any],
        *args: Any,
        on_success: Callable[[Any], None] | None = None,
        on_error: Callable[[Exception], None] | None = None,
        **kwargs: Any,
    ) -> threading.Thread:
        """Run ``func(*args, **kwargs)`` in a background thread.

        Args:
            func: The function to execute
            *args: Positional arguments for func
            on_success: Optional callback receiving the result
            on_error: Optional callback receiving the exception
            **kwargs: Keyword arguments for func

        Returns:
            The started thread

        Long-running functions should poll :meth:`is_stopped` and return early
        once it is True.
        """

        def wrapper():
            try:
                result = func(*args, **kwargs)
            except Exception as exc:
                logger.exception(f"Background task {name} failed: {exc}")
                if on_error:
                    self._dispatch(on_error, exc)
                return

            if on_success:
                self._dispatch(on_success, result)

        name = getattr(func, "__name__", repr(func))
        thread = threading.Thread(target=wrapper, name=f"worker-{name}", daemon=True)
        with self._lock:
            self._threads = [t for t in self._threads if t.is_alive()]
            self._threads.append(thread)
        thread.start()
        logger.debug(f"Started background thread: {name}")
        return thread

    def is_stopped(self) -> bool:
        """True once :meth:`shutdown` has been requested."""
        return self._stop_event.is_set()

    def shutdown(self, timeout: float = 10.0) -> None:
        """Signal all threads to stop and wait for them to finish."""
        logger.debug("Shutting down background worker")
        self._stop_event.set()

        with self._lock:
            threads = list(self._threads)

        for thread in threads:
            if thread.is_alive():
                thread.join(timeout=timeout)
                if thread.is_alive():
                    logger.warning(f"Thread {thread.name} did not finish within {timeout}s")

    def __enter__(self) -> BackgroundWorker:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.shutdown()
