"""
consoleapp cooperative cancellation.

Cancellation
- One-shot signal: cancel() flips it once and notifies subscribers in
  subscription order. Subscribing to an already-cancelled signal calls the
  callback immediately.
- Handlers poll cancelled / raise_if_cancelled(), or await wait().
- Cancellation.link(*sources) derives a signal cancelled by any of its sources.
  release() drops those subscriptions again.

InterruptCoordinator
- Owned by one invocation. While entered (and only on the main thread) it is
  the SIGINT handler; the previous handler is restored on exit.
- First interrupt: on_cancel() may veto by returning False; otherwise
  "Canceling..." goes to the error console and the linked cancellation fires.
- Any later interrupt: on_terminate() may veto by returning False; otherwise
  "Terminating..." goes to the error console and the process exits with code 1.
- The interrupt counter lives on the coordinator, never on the module.
"""
import asyncio
import logging
import os
import signal
import threading

from rich.console import Console

from .faults import ExitCode, OperationCancelledError
from .utils import Unset, palette, stylize

logger = logging.getLogger(__name__)

_STYLES = {
    "interrupt-notice": "bold #FFD600",
}


class Cancellation:
    """
    cooperative cancellation signal.
    """

    def __init__(self):
        self._cancelled = False
        self._callbacks = []
        self._links = []
        self._lock = threading.RLock()

    @property
    def cancelled(self):
        return self._cancelled

    def __repr__(self):
        return f"cancellation(cancelled={self._cancelled!r})"

    def cancel(self):
        """
        Request cancellation; subscribers run once, on the first call only.
        """
        with self._lock:
            if self._cancelled:
                return
            self._cancelled = True
            callbacks, self._callbacks = self._callbacks, []
        logger.debug("cancellation requested (%d subscriber(s))", len(callbacks))
        for callback in callbacks:
            callback()

    def subscribe(self, callback, /):
        """
        Call callback once cancellation is requested.

        Returns
        - Callable[[], None] removing the subscription (no-op once fired).
        """
        if not callable(callback):
            raise TypeError("subscribe() argument must be callable")
        with self._lock:
            if not self._cancelled:
                self._callbacks.append(callback)

                def unsubscribe():
                    with self._lock:
                        if callback in self._callbacks:
                            self._callbacks.remove(callback)
                return unsubscribe
        callback()
        return lambda: None

    def raise_if_cancelled(self):
        if self._cancelled:
            raise OperationCancelledError("the operation was cancelled")

    async def wait(self):
        """
        Suspend until cancellation is requested.
        """
        loop = asyncio.get_running_loop()
        future = loop.create_future()

        def resolve():
            if not future.done():
                future.set_result(None)

        unsubscribe = self.subscribe(lambda: loop.call_soon_threadsafe(resolve))
        try:
            await future
        finally:
            unsubscribe()

    @classmethod
    def link(cls, *sources):
        """
        New signal cancelled as soon as any source is (Unset sources are skipped).

        Call release() on the result once it is no longer needed so long-lived
        sources drop their subscription to it.
        """
        linked = cls()
        for source in sources:
            if source is Unset:
                continue
            if not isinstance(source, Cancellation):
                raise TypeError("link() arguments must be cancellations")
            linked._links.append(source.subscribe(linked.cancel))
        return linked

    def release(self):
        """
        Unsubscribe from the sources this signal was linked to.
        """
        with self._lock:
            links, self._links = self._links, []
        for unsubscribe in links:
            unsubscribe()


class InterruptCoordinator:
    """
    SIGINT handler bound to one invocation (use as a context manager).

    Parameters
    - cancellation: Cancellation fired by the first interrupt.
    - on_cancel: Callable[[], bool | None]; returning False vetoes the cancellation.
    - on_terminate: Callable[[], bool | None]; returning False vetoes termination.
    - stderr: rich Console receiving the notices.
    - colorful: style the notices.
    - exit: Callable[[int], None] used to terminate (os._exit).
    """

    def __init__(self, cancellation, /, *, on_cancel=Unset, on_terminate=Unset, stderr=Unset, colorful=False, exit=os._exit):
        self._cancellation = cancellation
        self._on_cancel = on_cancel
        self._on_terminate = on_terminate
        self._stderr = stderr if stderr is not Unset else Console(stderr=True)
        self._colorful = colorful
        self._exit = exit
        self._count = 0
        self._previous = Unset

    @property
    def count(self):
        return self._count

    @property
    def installed(self):
        return self._previous is not Unset

    def _notice(self, message):
        styles = palette(_STYLES)
        self._stderr.print(stylize(message, styles["interrupt-notice"], colorful=self._colorful), soft_wrap=True)

    def __call__(self, signum=signal.SIGINT, frame=None, /):
        self._count += 1
        logger.debug("interrupt #%d received", self._count)

        if self._count > 1:
            if self._on_terminate is not Unset and self._on_terminate() is False:
                return
            self._notice("Terminating...")
            self._exit(int(ExitCode.FAILURE))
            return

        if self._on_cancel is not Unset and self._on_cancel() is False:
            return
        self._notice("Canceling...")
        self._cancellation.cancel()

    def __enter__(self):
        if threading.current_thread() is threading.main_thread():
            self._previous = signal.signal(signal.SIGINT, self)
        else:
            logger.debug("not on the main thread; interrupts are left to the host")
        return self

    def __exit__(self, *exc_info):
        if self._previous is not Unset:
            # None means the previous handler was not installed from Python.
            previous = self._previous if self._previous is not None else signal.default_int_handler
            signal.signal(signal.SIGINT, previous)
            self._previous = Unset


__all__ = (
    "Cancellation",
    "InterruptCoordinator",
)
