import asyncio
import enum
import logging
import time
from dataclasses import dataclass, field
from typing import Any

from retrain_notifier.core.errors import (
    RetrainNotifierError,
    RetrainTimeoutError,
    TrainError,
    ValidationError,
)
from retrain_notifier.core.notifier import Notifier
from retrain_notifier.ml.model import Model
from retrain_notifier.ml.validator import validate_batch


logger = logging.getLogger(__name__)


class RetrainState(str, enum.Enum):
    RECEIVED = "received"
    TRAINING = "training"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    NOTIFIED = "notified"
    NOTIFY_FAILED = "notify_failed"


@dataclass
class RetrainOutcome:
    state: RetrainState
    rows: int
    duration: float = 0.0
    error: str | None = None
    detail: str | None = None
    metrics: dict[str, float] = field(default_factory=dict)

    @property
    def trained(self) -> bool:
        return self.state in (RetrainState.NOTIFIED, RetrainState.NOTIFY_FAILED)

    def as_dict(self) -> dict[str, Any]:
        return {
            "state": self.state.value,
            "rows": self.rows,
            "trained": self.trained,
            "duration": round(self.duration, 4),
            "error": self.error,
            "detail": self.detail,
            "metrics": self.metrics,
        }


class RetrainCoordinator:
    """
    Runs validate -> train -> notify for each submitted batch.

    Only one retrain is in flight at a time; later batches wait on the lock
    in arrival order. Errors after submission are logged and recorded in
    ``last_outcome``, they are never raised back to the submitter.
    """

    def __init__(self, model: Model, notifier: Notifier, timeout_seconds: float = 10.0, min_rows: int = 1):
        self.model = model
        self.notifier = notifier
        self.timeout_seconds = timeout_seconds
        self.min_rows = min_rows
        self.last_outcome: RetrainOutcome | None = None
        self._lock = asyncio.Lock()
        self._tasks: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def submit(self, batch) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(self.run(batch))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def drain(self) -> None:
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def run(self, batch) -> RetrainOutcome:
        started = time.monotonic()
        rows = len(batch) if isinstance(batch, list) else 0

        try:
            batch = validate_batch(batch, min_rows=self.min_rows)
        except ValidationError as exc:
            return self._failed(rows, started, exc)

        async with self._lock:
            logger.debug("retrain %s rows=%d", RetrainState.TRAINING.value, rows)
            try:
                state = await asyncio.wait_for(
                    asyncio.to_thread(self.model.fit, batch),
                    timeout=self.timeout_seconds,
                )
                await asyncio.to_thread(self.model.commit, state)
            except asyncio.TimeoutError:
                exc = RetrainTimeoutError(f"Training exceeded {self.timeout_seconds:g}s")
                return self._failed(rows, started, exc)
            except RetrainNotifierError as exc:
                return self._failed(rows, started, exc)
            except Exception as exc:
                logger.exception("unexpected error while training rows=%d", rows)
                return self._failed(rows, started, TrainError(str(exc)))
            metrics = dict(state.metrics)

        logger.info(
            "retrain %s rows=%d duration=%.3fs metrics=%s",
            RetrainState.SUCCEEDED.value, rows, time.monotonic() - started, metrics,
        )

        try:
            await asyncio.to_thread(self.notifier.notify, metrics)
        except Exception as exc:
            error = exc.kind if isinstance(exc, RetrainNotifierError) else type(exc).__name__
            outcome = RetrainOutcome(
                state=RetrainState.NOTIFY_FAILED,
                rows=rows,
                duration=time.monotonic() - started,
                error=error,
                detail=str(exc),
                metrics=metrics,
            )
            logger.error(
                "retrain %s rows=%d duration=%.3fs error=%s detail=%s",
                outcome.state.value, rows, outcome.duration, error, exc,
            )
            self.last_outcome = outcome
            return outcome

        outcome = RetrainOutcome(
            state=RetrainState.NOTIFIED,
            rows=rows,
            duration=time.monotonic() - started,
            metrics=metrics,
        )
        logger.info("retrain %s rows=%d duration=%.3fs", outcome.state.value, rows, outcome.duration)
        self.last_outcome = outcome
        return outcome

    def _failed(self, rows: int, started: float, exc: RetrainNotifierError) -> RetrainOutcome:
        outcome = RetrainOutcome(
            state=RetrainState.FAILED,
            rows=rows,
            duration=time.monotonic() - started,
            error=exc.kind,
            detail=str(exc),
        )
        logger.error(
            "retrain %s rows=%d duration=%.3fs error=%s detail=%s",
            outcome.state.value, rows, outcome.duration, exc.kind, exc,
        )
        self.last_outcome = outcome
        return outcome
