import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from retrain_notifier.api import get_coordinator
from retrain_notifier.core.coordinator import RetrainCoordinator
from retrain_notifier.core.errors import ValidationError
from retrain_notifier.ml.validator import parse_batch


logger = logging.getLogger(__name__)

router = APIRouter(tags=["Retrain"])


@router.post("/notify", status_code=202)
async def notify(request: Request, coordinator: RetrainCoordinator = Depends(get_coordinator)):
    """
    Accept a batch of training rows and retrain in the background.
    Only parse errors reach the caller; everything after the 202 is logged.
    """
    body = await request.body()
    try:
        batch = parse_batch(body, min_rows=coordinator.min_rows)
    except ValidationError as e:
        logger.warning("rejected batch: %s", e)
        raise HTTPException(status_code=400, detail=str(e))

    coordinator.submit(batch)
    return {"status": "accepted", "rows": len(batch)}
