"""
Purpose: Fire-and-forget alert delivery.
What it does:
Hands alerts to the external AlertSink on a small worker pool so the state
change that triggered them never waits on (or fails because of) the sink.
Sink failures are logged and dropped; nothing is retried here.
"""
from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import List, Optional, Protocol, Set

from .models import Alert

logger = logging.getLogger(__name__)


class AlertSink(Protocol):
    def create(self, alert: Alert) -> None:
        ...


class InMemoryAlertSink:
    """
    Keeps alerts in a list. Used by tests, scripts and local runs.
    """

    def __init__(self):
        self._alerts: List[Alert] = []
        self._lock = threading.Lock()

    def create(self, alert: Alert) -> None:
        with self._lock:
            self._alerts.append(alert)

    @property
    def alerts(self) -> List[Alert]:
        with self._lock:
            return list(self._alerts)


class AlertEmitter:
    """
    Asynchronous front for an AlertSink.

    With `asynchronous=False` delivery happens inline on the caller's thread
    (still never raising), which is what single-connection test databases need.
    """

    def __init__(self, sink: AlertSink, *, max_workers: int = 2, asynchronous: bool = True):
        self.sink = sink
        self.asynchronous = asynchronous
        self._executor: Optional[ThreadPoolExecutor] = None
        if asynchronous:
            self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="alerts")
        self._pending: Set[Future] = set()
        self._lock = threading.Lock()

    def emit(self, alert: Alert) -> None:
        """
        Queue an alert for delivery. Never raises.
        """
        if self._executor is None:
            self._deliver(alert)
            return

        try:
            future = self._executor.submit(self._deliver, alert)
        except RuntimeError:
            # executor already shut down
            logger.error("Alert emitter is closed, dropping alert %s (%s)", alert.id, alert.type.value)
            return

        with self._lock:
            self._pending.add(future)
        future.add_done_callback(self._forget)

    def drain(self, timeout: Optional[float] = None) -> None:
        """
        Block until every queued alert has been handed to the sink.
        """
        with self._lock:
            pending = list(self._pending)
        if pending:
            wait(pending, timeout=timeout)

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)

    def _forget(self, future: Future) -> None:
        with self._lock:
            self._pending.discard(future)

    def _deliver(self, alert: Alert) -> None:
        try:
            self.sink.create(alert)
        except Exception:
            logger.exception("Failed to store alert %s (%s)", alert.id, alert.type.value)
