import math

from fastapi import APIRouter, Body, Depends, HTTPException

from retrain_notifier.api import get_model
from retrain_notifier.core.errors import ValidationError
from retrain_notifier.ml.model import Model
from retrain_notifier.ml.validator import validate_features


router = APIRouter(tags=["Predict"])


@router.post("/predict")
def predict(payload: list = Body(...), model: Model = Depends(get_model)):
    """Score feature rows with the current model."""
    state = model.state
    if state is None:
        return {"status": "no_training_run"}
    try:
        rows = validate_features(payload, int(state.metrics["n_features"]))
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    predictions = model.predict(rows)
    if not all(math.isfinite(p) for p in predictions):
        raise HTTPException(status_code=400, detail="Prediction is not finite for these inputs")
    return {"version": state.version, "predictions": predictions}
