"""Threaded host for a simulation session.

SimulationWorker runs one SimulationSession on a dedicated thread. Inbound
messages arrive through a queue; timer ticks are generated on the same thread
when the session's TickTimer comes due. Exactly one unit of work (a message
or a tick) runs at a time, so the session never needs a lock.
"""

import logging
import queue
import threading
from typing import Any, Callable, Optional

from models.messages import ErrorResult, OutboundMessage
from models.session import SimulationSession

logger = logging.getLogger(__name__)

ResultCallback = Callable[[OutboundMessage], None]

_SHUTDOWN = object()


class SimulationWorker:
    """Single-threaded actor hosting a SimulationSession.

    Responsibilities:
    - Thread management (start, stop)
    - Serializing inbound messages and timer ticks
    - Delivering results to a callback or an outbox queue
    - Error isolation (a failing unit of work becomes an ``error`` result)

    Attributes:
        session: The hosted session. Only the worker thread touches it.
        is_running: Whether the worker thread is active.
        idle_wait: Seconds to block on the inbox when no tick is pending.
    """

    def __init__(
        self,
        session: Optional[SimulationSession] = None,
        on_result: Optional[ResultCallback] = None,
        idle_wait: float = 0.25,
    ) -> None:
        """Initialize the worker.

        Args:
            session: Session to host (a new one if omitted).
            on_result: Called on the worker thread with each outbound result.
                If omitted, results are queued for ``collect()``.
            idle_wait: Seconds to block on the inbox when no tick is pending.
        """
        self.session = session or SimulationSession()
        self.idle_wait = idle_wait
        self._on_result = on_result
        self._inbox: queue.Queue = queue.Queue()
        self._outbox: queue.Queue = queue.Queue()
        self._thread: Optional[threading.Thread] = None
        self._status = self.session.describe()
        self._status_lock = threading.Lock()
        self.is_running = False

    @property
    def session_id(self) -> str:
        return self.session.session_id

    def start(self) -> None:
        """Start the worker thread.

        Raises:
            RuntimeError: If the worker is already running.
        """
        if self.is_running:
            raise RuntimeError("Simulation worker is already running")

        self.is_running = True
        self._thread = threading.Thread(
            target=self._run_loop,
            name=f"sim-worker-{self.session_id[:8]}",
            daemon=True,
        )
        self._thread.start()
        logger.info(f"SimulationWorker for session {self.session_id} started")

    def stop(self, timeout: float = 1.0) -> None:
        """Stop the worker thread after its current unit of work."""
        if not self.is_running:
            return

        self._inbox.put(_SHUTDOWN)
        if self._thread:
            self._thread.join(timeout=timeout)

        self.is_running = False
        self._thread = None
        logger.info(f"SimulationWorker for session {self.session_id} stopped")

    def post(self, message: Any) -> None:
        """Queue an inbound message (raw dict or parsed model)."""
        self._inbox.put(message)

    def collect(
        self, max_results: Optional[int] = None, timeout: float = 0.0
    ) -> list[dict[str, Any]]:
        """Drain queued results in wire form.

        Waits up to ``timeout`` seconds for the first result, then takes
        whatever else is already queued, up to ``max_results``.

        Args:
            max_results: Upper bound on results returned (None for all).
            timeout: Seconds to wait for the first result.

        Returns:
            Results serialized with ``to_wire()``, in emission order.
        """
        results: list[dict[str, Any]] = []
        try:
            first = self._outbox.get(timeout=timeout) if timeout > 0 else self._outbox.get_nowait()
        except queue.Empty:
            return results
        results.append(first.to_wire())

        while max_results is None or len(results) < max_results:
            try:
                results.append(self._outbox.get_nowait().to_wire())
            except queue.Empty:
                break
        return results

    def status(self) -> dict[str, Any]:
        """Last status published by the worker thread."""
        with self._status_lock:
            return dict(self._status)

    # ===== Worker thread =====

    def _run_loop(self) -> None:
        """Main loop on the worker thread.

        Continuously:
        1. Wait for a message, at most until the next tick is due
        2. Dispatch the message, or fire the tick if it came due
        3. Publish results and status
        """
        timer = self.session.timer
        while True:
            wait = timer.seconds_until_due()
            try:
                message = self._inbox.get(timeout=self.idle_wait if wait is None else wait)
            except queue.Empty:
                message = None

            if message is _SHUTDOWN:
                break

            try:
                if message is not None:
                    results = self.session.dispatch(message)
                elif timer.is_due():
                    timer.mark_fired()
                    results = self.session.tick()
                else:
                    continue
            except Exception as e:
                # Log but keep the session alive for further messages
                logger.error(
                    f"Error in session {self.session_id}: {e}", exc_info=True
                )
                results = [ErrorResult(message=f"Internal error: {e}")]

            self._publish(results)

        self.session.timer.stop()

    def _publish(self, results: list[OutboundMessage]) -> None:
        with self._status_lock:
            self._status = self.session.describe()
        for result in results:
            if self._on_result is not None:
                try:
                    self._on_result(result)
                except Exception as e:
                    logger.error(f"Result callback failed: {e}", exc_info=True)
            else:
                self._outbox.put(result)
