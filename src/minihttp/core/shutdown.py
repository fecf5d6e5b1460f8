"""
=============================================================================
SHUTDOWN CONTROLLER
=============================================================================

Decides what SIGINT / SIGTERM mean for a server that handles exactly
one connection at a time.

=============================================================================
TWO FLAGS, TWO OUTCOMES
=============================================================================

A signal can arrive at two very different moments:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │  1. Blocked in accept()  (waiting = True)                           │
    │     └── Nobody is being served. Leave NOW.                          │
    │         The handler raises SystemExit(0) straight out of accept().  │
    │                                                                      │
    │  2. Mid-exchange  (waiting = False)                                 │
    │     └── A client is half-way through getting its file.             │
    │         The handler only clears `running`. The exchange finishes,   │
    │         the loop checks `running` at the top and exits cleanly.     │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Without the `waiting` flag we would have to pick one behavior for both
cases: either cut a client off mid-response, or sit forever in an
accept() that no client will ever complete.

=============================================================================
SIGNAL HANDLER RULES
=============================================================================

Python runs signal handlers in the main thread, between bytecodes.
When accept() is interrupted, the handler runs and, if it returns
normally, accept() is reissued automatically (PEP 475). That is what
makes case 2 safe: in-flight recv/send calls resume as if nothing
happened.

Handlers are only installed from the main thread. A server embedded in
a background thread (tests, for example) is stopped with request_stop().

=============================================================================
"""

import logging
import signal
import threading
from contextlib import contextmanager
from typing import Dict, Iterator, Optional


logger = logging.getLogger(__name__)


SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class ShutdownController:
    """
    Cooperative cancellation for the accept loop.

    Attributes:
        waiting: True only while the loop is blocked in accept().
    """

    def __init__(self):
        self._running = threading.Event()
        self._running.set()
        self.waiting = False
        self._original_handlers: Dict[int, object] = {}
        self.last_signal: Optional[signal.Signals] = None

    @property
    def running(self) -> bool:
        """False once a stop has been requested."""
        return self._running.is_set()

    def request_stop(self) -> None:
        """Ask the loop to exit after the current exchange. Idempotent."""
        self._running.clear()

    def reset(self) -> None:
        """Re-arm the controller for a new run."""
        self._running.set()
        self.waiting = False
        self.last_signal = None

    @contextmanager
    def accepting(self) -> Iterator[None]:
        """Mark the block of code that waits in accept()."""
        self.waiting = True
        try:
            yield
        finally:
            self.waiting = False

    def handle_signal(self, signum: int, frame) -> None:
        """
        Signal handler for SIGINT and SIGTERM.

        Raises:
            SystemExit: If the loop is blocked waiting for a connection.
        """
        self.last_signal = signal.Signals(signum)
        logger.info(f"Received {self.last_signal.name}, initiating shutdown...")
        self.request_stop()

        if self.waiting:
            raise SystemExit(0)

    def install(self) -> bool:
        """
        Install handle_signal() for SIGINT and SIGTERM.

        Returns:
            True if installed, False when not called from the main thread.
        """
        if threading.current_thread() is not threading.main_thread():
            logger.debug("Not in main thread, signal handlers not installed")
            return False

        for sig in SHUTDOWN_SIGNALS:
            self._original_handlers[sig] = signal.signal(sig, self.handle_signal)
        return True

    def restore(self) -> None:
        """Put back the handlers that were active before install()."""
        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler)
        self._original_handlers.clear()
