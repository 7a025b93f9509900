import logging

import pytest

from retrain_notifier.core.config import DEFAULT_NOTIFIER_URL, Settings, configure_logging


class TestSettings:

    def test_defaults(self):
        settings = Settings.from_env({})
        assert settings.notifier_url == DEFAULT_NOTIFIER_URL
        assert settings.port == 8080
        assert settings.retrain_timeout == 10.0
        assert settings.notify_timeout == 5.0
        assert settings.min_batch_rows == 1
        assert settings.model_path is None
        assert settings.log_level == "INFO"

    def test_reads_environment(self):
        settings = Settings.from_env({
            "NOTIFIER_URL": "https://hooks.example.com/metrics",
            "PORT": "9090",
            "HOST": "127.0.0.1",
            "RETRAIN_TIMEOUT_SECONDS": "2.5",
            "NOTIFY_TIMEOUT_SECONDS": "1",
            "MIN_BATCH_ROWS": "3",
            "MODEL_PATH": "/tmp/model.joblib",
            "LOG_LEVEL": "debug",
        })
        assert settings.notifier_url == "https://hooks.example.com/metrics"
        assert settings.port == 9090
        assert settings.host == "127.0.0.1"
        assert settings.retrain_timeout == 2.5
        assert settings.notify_timeout == 1.0
        assert settings.min_batch_rows == 3
        assert settings.model_path == "/tmp/model.joblib"
        assert settings.log_level == "DEBUG"

    def test_blank_values_fall_back(self):
        settings = Settings.from_env({"PORT": " ", "NOTIFIER_URL": "", "MODEL_PATH": ""})
        assert settings.port == 8080
        assert settings.notifier_url == DEFAULT_NOTIFIER_URL
        assert settings.model_path is None

    @pytest.mark.parametrize(
        "env",
        [
            {"PORT": "http"},
            {"PORT": "0"},
            {"RETRAIN_TIMEOUT_SECONDS": "soon"},
            {"RETRAIN_TIMEOUT_SECONDS": "-1"},
            {"NOTIFY_TIMEOUT_SECONDS": "0"},
            {"MIN_BATCH_ROWS": "0"},
        ],
    )
    def test_invalid_values(self, env):
        with pytest.raises(ValueError):
            Settings.from_env(env)


def test_configure_logging_installs_one_handler():
    root = logging.getLogger()
    before = list(root.handlers)
    level = root.level
    try:
        configure_logging("DEBUG")
        configure_logging("DEBUG")
        ours = [h for h in root.handlers if getattr(h, "_retrain_notifier", False)]
        assert len(ours) == 1
        assert root.level == logging.DEBUG
    finally:
        for h in root.handlers[:]:
            if h not in before:
                root.removeHandler(h)
        root.setLevel(level)
