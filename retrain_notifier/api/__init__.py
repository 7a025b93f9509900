from fastapi import Request

from retrain_notifier.core.coordinator import RetrainCoordinator
from retrain_notifier.ml.model import Model


def get_coordinator(request: Request) -> RetrainCoordinator:
    return request.app.state.coordinator


def get_model(request: Request) -> Model:
    return request.app.state.coordinator.model
