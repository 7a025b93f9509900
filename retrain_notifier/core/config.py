import logging
import os
from dataclasses import dataclass
from typing import Mapping


DEFAULT_NOTIFIER_URL = "http://localhost:9000/notify"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def _get_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {raw!r}")
    return value


def _get_int(env: Mapping[str, str], name: str, default: int, minimum: int = 1) -> int:
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}, got {raw!r}")
    return value


@dataclass(frozen=True)
class Settings:
    notifier_url: str = DEFAULT_NOTIFIER_URL
    host: str = "0.0.0.0"
    port: int = 8080
    retrain_timeout: float = 10.0
    notify_timeout: float = 5.0
    min_batch_rows: int = 1
    model_path: str | None = None
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "Settings":
        """
        Read settings from the environment:
        - NOTIFIER_URL: where metrics are POSTed after each retrain
        - HOST / PORT: listen address
        - RETRAIN_TIMEOUT_SECONDS / NOTIFY_TIMEOUT_SECONDS
        - MIN_BATCH_ROWS: smallest batch accepted for training
        - MODEL_PATH: optional joblib artifact kept in sync with the model
        - LOG_LEVEL
        """
        if env is None:
            env = os.environ

        return cls(
            notifier_url=env.get("NOTIFIER_URL", "").strip() or DEFAULT_NOTIFIER_URL,
            host=env.get("HOST", "").strip() or "0.0.0.0",
            port=_get_int(env, "PORT", 8080),
            retrain_timeout=_get_float(env, "RETRAIN_TIMEOUT_SECONDS", 10.0),
            notify_timeout=_get_float(env, "NOTIFY_TIMEOUT_SECONDS", 5.0),
            min_batch_rows=_get_int(env, "MIN_BATCH_ROWS", 1),
            model_path=env.get("MODEL_PATH", "").strip() or None,
            log_level=(env.get("LOG_LEVEL", "").strip() or "INFO").upper(),
        )


def configure_logging(level: str = "INFO") -> None:
    root = logging.getLogger()
    root.setLevel(level)
    if not any(getattr(h, "_retrain_notifier", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._retrain_notifier = True
        root.addHandler(handler)
