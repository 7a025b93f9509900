import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from retrain_notifier import __version__
from retrain_notifier.api.routes.notify import router as notify_router
from retrain_notifier.api.routes.predict import router as predict_router
from retrain_notifier.api.routes.status import router as status_router
from retrain_notifier.core.config import Settings, configure_logging
from retrain_notifier.core.coordinator import RetrainCoordinator
from retrain_notifier.core.notifier import Notifier
from retrain_notifier.ml.model import Model


logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    model: Model | None = None,
    notifier: Notifier | None = None,
) -> FastAPI:
    if settings is None:
        settings = Settings.from_env()
    if model is None:
        model = Model(artifact_path=settings.model_path)
    if notifier is None:
        notifier = Notifier(settings.notifier_url, timeout=settings.notify_timeout)

    coordinator = RetrainCoordinator(
        model,
        notifier,
        timeout_seconds=settings.retrain_timeout,
        min_rows=settings.min_batch_rows,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings.log_level)
        if model.load():
            logger.info("Model restored, metrics available")
        logger.info(
            "Retrain notifier ready: notifier=%s timeout=%gs",
            settings.notifier_url, settings.retrain_timeout,
        )
        yield
        if coordinator.pending:
            logger.info("Waiting for %d retrain task(s) to finish", coordinator.pending)
        await coordinator.drain()

    app = FastAPI(
        title="Retrain Notifier",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.coordinator = coordinator

    app.include_router(notify_router)
    app.include_router(predict_router)
    app.include_router(status_router)

    @app.get("/health")
    def health():
        return {"status": "ok", "model_trained": model.is_trained}

    return app


app = create_app()


def run():
    settings = app.state.settings
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
