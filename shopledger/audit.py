"""
Audit recorder.

Every inbound request is appended to ``audit_logs`` as (method, endpoint,
timestamp, payload). Recording is fire-and-forget: entries are queued and a
background thread writes them with its own sessions, so a slow or failing
audit table never blocks or fails the request that produced the entry.
"""
import json
import queue
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional

from sqlalchemy.orm import Session

from shopledger.core.config import settings
from shopledger.core.database import get_session_factory
from shopledger.logging_config import get_logger
from shopledger.models.audit import AuditLog

logger = get_logger("audit")

_STOP = object()


@dataclass
class AuditEntry:
    method: str
    endpoint: str
    timestamp: datetime
    payload: str


def serialize_payload(payload: Any) -> str:
    """Payload as JSON text. Raw bytes that are not JSON are kept as text."""
    if payload is None or payload == b"" or payload == "":
        return "{}"
    if isinstance(payload, (bytes, bytearray)):
        payload = payload.decode("utf-8", errors="replace")
    if isinstance(payload, str):
        try:
            payload = json.loads(payload)
        except ValueError:
            return payload
    return json.dumps(payload, default=str)


class AuditRecorder:
    """Queue-backed audit writer."""

    def __init__(
        self,
        session_factory: Optional[Callable[[], Session]] = None,
        enabled: bool = True,
        max_queue_size: int = 1000,
    ):
        self.enabled = enabled
        self._session_factory = session_factory
        self._queue: queue.Queue = queue.Queue(maxsize=max_queue_size)
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def configure(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    def start(self) -> None:
        with self._lock:
            if self.running or not self.enabled:
                return
            self._thread = threading.Thread(
                target=self._run, name="audit-writer", daemon=True
            )
            self._thread.start()
            logger.info("Audit writer started")

    def stop(self, timeout: float = 5.0) -> None:
        """Write out what is queued, then stop the writer."""
        with self._lock:
            if not self.running:
                return
            self._queue.put(_STOP)
            self._thread.join(timeout)
            self._thread = None
            logger.info("Audit writer stopped")

    def flush(self) -> None:
        """Block until every queued entry has been handled."""
        if self.running:
            self._queue.join()

    def record(self, method: str, endpoint: str, payload: Any = None) -> None:
        """Queue one entry. Never raises."""
        if not self.enabled:
            return
        try:
            entry = AuditEntry(
                method=method,
                endpoint=endpoint,
                timestamp=datetime.now(),
                payload=serialize_payload(payload),
            )
            if not self.running:
                self.start()
            self._queue.put_nowait(entry)
        except queue.Full:
            logger.warning(f"Audit queue full, dropped entry for {method} {endpoint}")
        except Exception:
            logger.error(f"Could not record audit entry for {method} {endpoint}", exc_info=True)

    def _run(self) -> None:
        while True:
            entry = self._queue.get()
            try:
                if entry is _STOP:
                    return
                self._write(entry)
            finally:
                self._queue.task_done()

    def _write(self, entry: AuditEntry) -> None:
        try:
            session_factory = self._session_factory or get_session_factory()
            with session_factory() as session:
                session.add(AuditLog(
                    method=entry.method,
                    endpoint=entry.endpoint,
                    timestamp=entry.timestamp,
                    payload=entry.payload,
                ))
                session.commit()
        except Exception:
            logger.error(
                f"Failed to write audit entry {entry.method} {entry.endpoint}", exc_info=True
            )


audit_recorder = AuditRecorder(
    enabled=settings.audit_enabled,
    max_queue_size=settings.audit_queue_size,
)
