import logging
import math
import os
import threading
from pathlib import Path
from types import MappingProxyType
from typing import Any, Callable, Mapping

import joblib
import pandas as pd
from sklearn.linear_model import LinearRegression

from retrain_notifier.core.errors import MetricsError, TrainError
from retrain_notifier.ml.retrain import TrainedState, feature_columns, retrain_model
from retrain_notifier.ml.validator import DataBatch


logger = logging.getLogger(__name__)


def save_artifact(state: TrainedState, path: str) -> None:
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    tmp = target.with_name(target.name + ".tmp")
    joblib.dump(
        {
            "estimator": state.estimator,
            "metrics": dict(state.metrics),
            "version": state.version,
            "rows": state.rows,
        },
        tmp,
    )
    # Atomic swap
    os.replace(tmp, target)


def load_artifact(path: str) -> TrainedState | None:
    if not os.path.exists(path):
        return None
    data = joblib.load(path)
    return TrainedState(
        estimator=data["estimator"],
        metrics=MappingProxyType(dict(data["metrics"])),
        version=data["version"],
        rows=int(data["rows"]),
    )


class Model:
    """
    Trainable model shared by every retrain request.

    ``fit`` builds a candidate state without touching the model; ``commit``
    makes a candidate visible, estimator and metrics together. ``train`` does
    both in one call.
    """

    def __init__(
        self,
        estimator_factory: Callable[[], Any] = LinearRegression,
        artifact_path: str | None = None,
    ):
        self._estimator_factory = estimator_factory
        self.artifact_path = artifact_path
        self._lock = threading.Lock()
        self._state: TrainedState | None = None

    @property
    def state(self) -> TrainedState | None:
        return self._state

    @property
    def is_trained(self) -> bool:
        return self._state is not None

    def fit(self, batch: DataBatch) -> TrainedState:
        if not batch:
            raise TrainError("Cannot train on an empty batch")
        try:
            state = retrain_model(batch, self._estimator_factory)
        except Exception as e:
            raise TrainError(f"Training failed: {e}") from e
        bad = sorted(name for name, value in state.metrics.items() if not math.isfinite(value))
        if bad:
            raise TrainError(f"Training produced non-finite metrics: {', '.join(bad)}")
        return state

    def commit(self, state: TrainedState) -> None:
        with self._lock:
            if self.artifact_path:
                try:
                    save_artifact(state, self.artifact_path)
                except Exception as e:
                    raise TrainError(f"Could not save model artifact: {e}") from e
            self._state = state

    def train(self, batch: DataBatch) -> None:
        self.commit(self.fit(batch))

    def get_metrics(self) -> Mapping[str, float]:
        state = self._state
        if state is None:
            raise MetricsError("Model has not been trained yet")
        return state.metrics

    def predict(self, rows: list[list[float]]) -> list[float]:
        state = self._state
        if state is None:
            raise MetricsError("Model has not been trained yet")
        n_features = int(state.metrics["n_features"])
        X = pd.DataFrame(rows, columns=feature_columns(n_features))
        return [float(v) for v in state.estimator.predict(X)]

    def load(self) -> bool:
        if not self.artifact_path:
            return False
        try:
            state = load_artifact(self.artifact_path)
        except Exception as e:
            logger.warning("Could not load model artifact %s: %s", self.artifact_path, e)
            return False
        if state is None:
            return False
        with self._lock:
            self._state = state
        logger.info("Loaded model %s from %s (%d rows)", state.version, self.artifact_path, state.rows)
        return True
