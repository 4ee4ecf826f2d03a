"""Error and intervention reporters.

Both are fire-and-forget collaborators: nothing they do can fail the flow
that called them.
"""

from __future__ import annotations

import json
import logging
import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Tuple

from tenacity import RetryCallState, Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from .domain.systems import utcnow

logger = logging.getLogger(__name__)


class ErrorReporter(Protocol):
    def report(self, error: BaseException) -> None:
        ...


class InterventionReporter(Protocol):
    def notify(self, leverage_point_id: str, system_id: str) -> None:
        ...


class LoggingErrorReporter:
    def report(self, error: BaseException) -> None:
        logger.warning("Operation failed (%s): %s", type(error).__name__, error)


class RecordingErrorReporter:
    """Keeps reported errors in memory; handy for embedding and tests."""

    def __init__(self) -> None:
        self.errors: List[BaseException] = []

    def report(self, error: BaseException) -> None:
        self.errors.append(error)


class EventLogReporter:
    """Append intervention proposals to a JSONL log, retrying transient I/O errors."""

    def __init__(self, log_path: Optional[str | Path] = None, *, retry_attempts: int = 3, retry_initial_delay: float = 0.1):
        self.enabled = log_path is not None
        self.log_path = Path(log_path) if log_path else None
        self.retry_attempts = max(1, int(retry_attempts))
        self.retry_initial_delay = max(0.01, float(retry_initial_delay))
        self.notified: List[Tuple[str, str]] = []

    def notify(self, leverage_point_id: str, system_id: str) -> None:
        self.notified.append((leverage_point_id, system_id))
        if not self.enabled:
            return
        event: Dict[str, Any] = {
            "type": "intervention_proposed",
            "leverage_point_id": leverage_point_id,
            "system_id": system_id,
            "timestamp": utcnow().isoformat(),
        }
        self._publish_with_retry(json.dumps(event, separators=(",", ":")))

    def _write(self, payload: str) -> None:
        self.log_path.parent.mkdir(parents=True, exist_ok=True)
        with self.log_path.open("a", encoding="utf-8") as fh:
            fh.write(payload + "\n")

    def _publish_with_retry(self, payload: str) -> None:
        def _log_retry_warning(retry_state: RetryCallState) -> None:
            exc = retry_state.outcome.exception() if retry_state.outcome else None
            if exc:
                logger.warning(
                    "Intervention log retry %s/%s failed: %s",
                    retry_state.attempt_number,
                    self.retry_attempts,
                    exc,
                )

        retryer = Retrying(
            retry=retry_if_exception_type(OSError),
            stop=stop_after_attempt(self.retry_attempts),
            wait=wait_exponential(multiplier=self.retry_initial_delay, min=self.retry_initial_delay, max=2.0),
            reraise=True,
            before_sleep=_log_retry_warning,
            sleep=time.sleep,
        )
        try:
            retryer(self._write, payload)
        except OSError as exc:
            logger.warning("Failed to record intervention after %s attempts: %s", self.retry_attempts, exc)


__all__ = [
    "ErrorReporter",
    "InterventionReporter",
    "LoggingErrorReporter",
    "RecordingErrorReporter",
    "EventLogReporter",
]
