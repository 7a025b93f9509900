import logging
import threading
from unittest.mock import Mock

import pytest

from retrain_notifier.core.notifier import Notifier
from retrain_notifier.ml.model import Model


@pytest.fixture
def batch():
    # y = 2x + 1
    return [[0.0, 1.0], [1.0, 3.0], [2.0, 5.0], [3.0, 7.0]]


@pytest.fixture
def other_batch():
    # y = -3x, different size so the two trained states are easy to tell apart
    return [[0.0, 0.0], [1.0, -3.0], [2.0, -6.0]]


@pytest.fixture
def model():
    return Model()


@pytest.fixture
def notifier():
    return Mock(spec=Notifier)


@pytest.fixture
def gate():
    event = threading.Event()
    yield event
    event.set()


@pytest.fixture(autouse=True)
def restore_root_logger():
    # app startup installs a root handler; keep tests independent of each other
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for h in root.handlers[:]:
        if h not in handlers:
            root.removeHandler(h)
    root.setLevel(level)
