from fastapi import FastAPI

from shotcoach import models  # noqa: F401
from shotcoach.api.beans import router as bean_router
from shotcoach.api.grinder_configurations import router as grinder_router
from shotcoach.api.health import router as health_router
from shotcoach.api.observability import router as observability_router
from shotcoach.api.shots import router as shot_router
from shotcoach.api.statistics import router as statistics_router
from shotcoach.core.config import settings
from shotcoach.core.database import Base, engine
from shotcoach.core.observability_middleware import ObservabilityMiddleware


def create_app() -> FastAPI:
    app = FastAPI(title=settings.app_name)

    if settings.auto_create_tables:
        Base.metadata.create_all(bind=engine)

    app.add_middleware(ObservabilityMiddleware)

    app.include_router(health_router, prefix=settings.api_prefix)
    app.include_router(grinder_router, prefix=settings.api_prefix)
    app.include_router(bean_router, prefix=settings.api_prefix)
    app.include_router(shot_router, prefix=settings.api_prefix)
    app.include_router(statistics_router, prefix=settings.api_prefix)
    app.include_router(observability_router, prefix=settings.api_prefix)
    return app


app = create_app()
