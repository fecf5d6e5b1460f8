"""
Unit tests for the shutdown controller.
"""

import signal
import threading

import pytest

from minihttp.core.shutdown import ShutdownController


class TestShutdownController:
    """Tests for the two-flag signal handling."""

    def test_initial_state(self):
        controller = ShutdownController()

        assert controller.running is True
        assert controller.waiting is False

    def test_signal_while_idle_exits_immediately(self):
        """Test that a signal during accept() leaves at once."""
        controller = ShutdownController()

        with pytest.raises(SystemExit) as exc_info:
            with controller.accepting():
                controller.handle_signal(signal.SIGINT, None)

        assert exc_info.value.code == 0
        assert controller.running is False
        assert controller.waiting is False

    def test_signal_mid_exchange_only_clears_running(self):
        """Test that a signal while serving lets the exchange finish."""
        controller = ShutdownController()

        controller.handle_signal(signal.SIGTERM, None)

        assert controller.running is False
        assert controller.last_signal == signal.SIGTERM

    def test_accepting_resets_waiting_on_error(self):
        controller = ShutdownController()

        with pytest.raises(OSError):
            with controller.accepting():
                assert controller.waiting is True
                raise OSError("accept failed")

        assert controller.waiting is False

    def test_request_stop_is_idempotent(self):
        controller = ShutdownController()
        controller.request_stop()
        controller.request_stop()

        assert controller.running is False

    def test_reset(self):
        controller = ShutdownController()
        controller.handle_signal(signal.SIGINT, None)
        controller.reset()

        assert controller.running is True
        assert controller.last_signal is None

    def test_install_and_restore(self):
        """Test that handlers are installed in the main thread and restored."""
        before = signal.getsignal(signal.SIGTERM)
        controller = ShutdownController()

        assert controller.install() is True
        try:
            assert signal.getsignal(signal.SIGTERM) == controller.handle_signal
        finally:
            controller.restore()

        assert signal.getsignal(signal.SIGTERM) == before

    def test_install_skipped_outside_main_thread(self):
        controller = ShutdownController()
        result = []

        thread = threading.Thread(target=lambda: result.append(controller.install()))
        thread.start()
        thread.join()

        assert result == [False]
