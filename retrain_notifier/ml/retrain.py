import math
from dataclasses import dataclass
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Callable, Mapping

import pandas as pd
from sklearn.linear_model import LinearRegression
from sklearn.metrics import mean_absolute_error, mean_squared_error, r2_score

from retrain_notifier.ml.validator import DataBatch


TARGET_COLUMN = "target"


@dataclass(frozen=True)
class TrainedState:
    estimator: Any
    metrics: Mapping[str, float]
    version: str
    rows: int


def feature_columns(n_features: int) -> list[str]:
    return [f"f{i}" for i in range(n_features)]


def batch_to_frame(batch: DataBatch) -> pd.DataFrame:
    n_features = len(batch[0]) - 1
    return pd.DataFrame(batch, columns=feature_columns(n_features) + [TARGET_COLUMN])


def ensure_columns(df: pd.DataFrame) -> pd.DataFrame:
    if TARGET_COLUMN not in df.columns or len(df.columns) < 2:
        raise ValueError("Training data must have feature columns and a target column")
    if df.isna().any().any():
        raise ValueError("Training data contains missing values")
    return df


def compute_metrics(y_true, y_pred, n_features: int) -> dict[str, float]:
    metrics = {
        "mse": float(mean_squared_error(y_true, y_pred)),
        "mae": float(mean_absolute_error(y_true, y_pred)),
        "n_samples": float(len(y_true)),
        "n_features": float(n_features),
    }
    # r2 is undefined for a single sample
    if len(y_true) >= 2:
        r2 = float(r2_score(y_true, y_pred))
        if math.isfinite(r2):
            metrics["r2"] = r2
    return metrics


def retrain_model(batch: DataBatch, estimator_factory: Callable[[], Any] = LinearRegression) -> TrainedState:
    """
    Fit a fresh estimator on the batch and score it on the same rows.
    Nothing outside the returned state is touched.
    """
    if not batch:
        raise ValueError("Training data is empty")

    df = ensure_columns(batch_to_frame(batch))

    X = df.drop(columns=[TARGET_COLUMN])
    y = df[TARGET_COLUMN]

    model = estimator_factory()
    model.fit(X, y)

    metrics = compute_metrics(y, model.predict(X), n_features=X.shape[1])
    version = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S_%f")

    return TrainedState(
        estimator=model,
        metrics=MappingProxyType(metrics),
        version=version,
        rows=len(df),
    )
