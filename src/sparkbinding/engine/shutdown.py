# src/sparkbinding/engine/shutdown.py
"""Signal-driven graceful shutdown for the host process.

The host registers the handler explicitly and hands it the controller:

    with shutdown_handler(controller):
        controller.init()
        controller.await_termination()

SIGINT/SIGTERM never stop the job on the signal frame. They start a
dedicated thread that calls controller.close(), so a graceful stop (which
waits for the in-flight micro-batch) never runs inside a signal handler
and the main thread stays free to return from await_termination().
"""

from __future__ import annotations

import signal
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, Protocol

from sparkbinding.core.logging import get_logger

logger = get_logger(__name__)

SHUTDOWN_THREAD_NAME = "sparkbinding.shutdown"


class Stoppable(Protocol):
    def close(self) -> object: ...


class ShutdownRequest:
    """Starts at most one stop thread for a controller.

    Repeated signals reuse the thread already started; the controller's own
    stop-once discipline makes any extra close() harmless anyway.
    """

    def __init__(self, target: Stoppable) -> None:
        self._target = target
        self._lock = threading.Lock()
        self._thread: threading.Thread | None = None

    @property
    def thread(self) -> threading.Thread | None:
        return self._thread

    def trigger(self) -> threading.Thread:
        with self._lock:
            if self._thread is None:
                self._thread = threading.Thread(target=self._run, name=SHUTDOWN_THREAD_NAME, daemon=True)
                self._thread.start()
            return self._thread

    def _run(self) -> None:
        logger.debug("Gracefully stopping streaming job")
        try:
            self._target.close()
        except Exception:
            logger.exception("Graceful stop failed")
            raise
        logger.info("Application stopped")


@contextmanager
def shutdown_handler(target: Stoppable) -> Iterator[ShutdownRequest]:
    """Install SIGINT/SIGTERM handlers that gracefully stop ``target``.

    On first signal: starts the stop thread and restores the default SIGINT
    handler, so a second Ctrl-C force-kills via KeyboardInterrupt.

    From a non-main thread signal registration is skipped (Python raises
    ValueError if signal.signal() is called outside the main thread). The
    yielded ShutdownRequest still works when triggered directly.

    Restores the original handlers on exit (main thread only).
    """
    request = ShutdownRequest(target)

    if threading.current_thread() is not threading.main_thread():
        yield request
        return

    original_sigint = signal.getsignal(signal.SIGINT)
    original_sigterm = signal.getsignal(signal.SIGTERM)

    def _handler(signum: int, frame: Any) -> None:
        logger.info("Shutdown signal received", signal=signal.Signals(signum).name)
        request.trigger()
        signal.signal(signal.SIGINT, signal.default_int_handler)

    signal.signal(signal.SIGINT, _handler)
    signal.signal(signal.SIGTERM, _handler)
    try:
        yield request
    finally:
        signal.signal(signal.SIGINT, original_sigint)
        signal.signal(signal.SIGTERM, original_sigterm)
