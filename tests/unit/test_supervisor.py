"""Unit tests for the reconnect supervisor loop"""

from __future__ import annotations

from unittest.mock import Mock

import pytest

from ptr2obs.common.errors import ConnectError
from ptr2obs.session.manager import SessionManager, SessionState
from ptr2obs.session.supervisor import ReconnectSupervisor


class _StopLoop(Exception):
    """Raised by fake sleep to break out of run_forever."""


def _supervisor(connector, sleep=None) -> tuple[SessionManager, ReconnectSupervisor]:
    """Build a manager/supervisor pair with default intervals."""
    manager = SessionManager("ws://localhost:4455", connector=connector)
    supervisor = ReconnectSupervisor(
        manager,
        backoff_seconds=5.0,
        check_interval_seconds=1.0,
        sleep=sleep or Mock(),
    )
    return manager, supervisor


class TestIterationRun:
    """Tests for single supervisor iterations."""

    def test_connects_when_absent(self, accepting_handle, connector_factory) -> None:
        """An absent session is established on the first iteration."""
        manager, supervisor = _supervisor(connector_factory([accepting_handle]))

        assert supervisor.iteration_run() == 1.0
        assert manager.session_get().state is SessionState.READY

    def test_healthy_session_not_reconnected(self, accepting_handle, connector_factory) -> None:
        """A live READY session is only polled."""
        connector = connector_factory([accepting_handle])
        manager, supervisor = _supervisor(connector)
        supervisor.iteration_run()

        assert supervisor.iteration_run() == 1.0
        assert len(connector.calls) == 1

    def test_failure_backs_off(self, connector_factory) -> None:
        """A failed attempt waits back-off plus polling interval."""
        manager, supervisor = _supervisor(connector_factory([ConnectError("refused")]))

        assert supervisor.iteration_run() == 6.0
        assert supervisor.attempts_failed == 1
        assert manager.session_get().state is SessionState.FAILED

    def test_retries_until_peer_accepts(self, accepting_handle, connector_factory) -> None:
        """Retry continues after failures and resets the failure count on success."""
        connector = connector_factory(
            [ConnectError("refused"), ConnectError("refused"), accepting_handle]
        )
        manager, supervisor = _supervisor(connector)

        delays = [supervisor.iteration_run() for _ in range(3)]

        assert delays == [6.0, 6.0, 1.0]
        assert supervisor.attempts_failed == 0
        assert manager.session_get().isReady()

    def test_reconnects_after_drop(self, handle_factory, hello_frame, identified_frame, connector_factory) -> None:
        """After a drop the session is READY again within one back-off window."""
        first = handle_factory([hello_frame, identified_frame])
        second = handle_factory([hello_frame, identified_frame])
        manager, supervisor = _supervisor(connector_factory([first, second]))
        supervisor.iteration_run()

        first.alive = False
        delay = supervisor.iteration_run()

        session = manager.session_get()
        assert session.isReady()
        assert session.handle is second
        assert delay <= 5.0
        assert first.closed is True


class TestRunForever:
    """Tests for the background loop."""

    def test_sleeps_between_iterations(self, connector_factory) -> None:
        """Each iteration's delay is passed to sleep."""
        sleep = Mock(side_effect=[None, _StopLoop()])
        _, supervisor = _supervisor(connector_factory([]), sleep=sleep)

        with pytest.raises(_StopLoop):
            supervisor.run_forever()

        assert [call.args[0] for call in sleep.call_args_list] == [6.0, 6.0]

    def test_start_runs_on_daemon_thread(self, connector_factory) -> None:
        """start() launches run_forever on a daemon thread."""
        _, supervisor = _supervisor(connector_factory([]))
        supervisor.run_forever = Mock()

        thread = supervisor.start()
        thread.join(timeout=2)

        assert thread.daemon is True
        supervisor.run_forever.assert_called_once_with()

    def test_unexpected_error_does_not_stop_loop(self, accepting_handle, connector_factory) -> None:
        """An iteration raising outside the error taxonomy is backed off and retried."""
        sleep = Mock(side_effect=[None, _StopLoop()])
        manager, supervisor = _supervisor(
            connector_factory([accepting_handle]), sleep=sleep
        )
        manager.session_check = Mock(side_effect=[RuntimeError("boom"), False, True])

        with pytest.raises(_StopLoop):
            supervisor.run_forever()

        assert [call.args[0] for call in sleep.call_args_list] == [6.0, 1.0]
        assert supervisor.attempts_failed == 0
        assert manager.session_get().isReady()
