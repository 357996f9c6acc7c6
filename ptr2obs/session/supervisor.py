"""
Reconnect supervisor.

Background control loop that keeps a READY session in the session manager's
slot. A healthy session is re-checked every polling interval. A failed attempt
waits the back-off on top of the polling interval. Retries never stop.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, NoReturn

from ptr2obs.session.manager import SessionManager

__all__ = ["ReconnectSupervisor"]

logger = logging.getLogger(__name__)

BACKOFF_SECONDS: float = 5.0
CHECK_INTERVAL_SECONDS: float = 1.0


class ReconnectSupervisor:
    """Re-establishes the session whenever it is not ready"""

    def __init__(
        self,
        session_manager: SessionManager,
        backoff_seconds: float = BACKOFF_SECONDS,
        check_interval_seconds: float = CHECK_INTERVAL_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """
        Initialize supervisor.

        Args:
            session_manager:
                Session manager to supervise.
            backoff_seconds:
                Wait after a failed reconnect attempt.
            check_interval_seconds:
                Wait between readiness checks when the session is healthy.
            sleep:
                Blocking sleep function.
        """
        self._session_manager: SessionManager = session_manager
        self._backoff_seconds: float = backoff_seconds
        self._check_interval_seconds: float = check_interval_seconds
        self._sleep: Callable[[float], None] = sleep
        self.attempts_failed: int = 0

    def iteration_run(self) -> float:
        """
        Run one readiness check, reconnecting if needed.

        Returns:
            Seconds to wait before the next iteration.
        """
        if self._session_manager.session_check():
            return self._check_interval_seconds

        logger.info("Session not ready; connecting to %s", self._session_manager.endpoint)
        if self._session_manager.session_establish():
            self.attempts_failed = 0
            return self._check_interval_seconds

        self.attempts_failed += 1
        delay: float = self._backoff_seconds + self._check_interval_seconds
        logger.warning(
            "Reconnect attempt %s failed; retrying in %.1fs", self.attempts_failed, delay
        )
        return delay

    def run_forever(self) -> NoReturn:
        """
        Supervise the session for the lifetime of the process.

        An unexpected error in one iteration is logged and backed off like a
        failed attempt; the loop never exits.
        """
        while True:
            try:
                delay: float = self.iteration_run()
            except Exception:
                self.attempts_failed += 1
                delay = self._backoff_seconds + self._check_interval_seconds
                logger.exception("Supervisor iteration failed; retrying in %.1fs", delay)
            self._sleep(delay)

    def start(self) -> threading.Thread:
        """
        Run the supervisor on a daemon thread.

        Returns:
            Started thread.
        """
        thread = threading.Thread(
            target=self.run_forever, name="ptr2obs-supervisor", daemon=True
        )
        thread.start()
        return thread
