from fastapi import APIRouter, Depends

from retrain_notifier.api import get_coordinator, get_model
from retrain_notifier.core.coordinator import RetrainCoordinator
from retrain_notifier.ml.model import Model


router = APIRouter(tags=["Status"])


@router.get("/metrics")
def metrics(model: Model = Depends(get_model)):
    state = model.state
    if state is None:
        return {"status": "no_training_run"}
    return {"version": state.version, "rows": state.rows, "metrics": dict(state.metrics)}


@router.get("/last-outcome")
def last_outcome(coordinator: RetrainCoordinator = Depends(get_coordinator)):
    outcome = coordinator.last_outcome
    if outcome is None:
        return {"status": "no_training_run"}
    return outcome.as_dict()
