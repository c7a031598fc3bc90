from contextlib import asynccontextmanager

from fastapi import FastAPI

from releasehub.api.v1.downloads import router as downloads_router
from releasehub.api.v1.releases import router as releases_router
from releasehub.api.v1.runtime_config import router as config_router
from releasehub.api.v1.subscribers import router as subscribers_router
from releasehub.core.config import AppSettings, settings
from releasehub.core.logging_setup import configure_logging
from releasehub.database.db_setup import create_db_engine, create_session_factory
from releasehub.database.initialize_db import init_db
from releasehub.exceptions.handlers import register_exception_handlers
from releasehub.services.distribution import build_distribution


def create_app(app_settings: AppSettings | None = None) -> FastAPI:
    app_settings = app_settings or settings
    engine = create_db_engine(app_settings.DATABASE_URL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(app_settings)
        init_db(engine)
        yield
        engine.dispose()

    app = FastAPI(title=app_settings.APP_NAME, lifespan=lifespan)
    app.state.settings = app_settings
    app.state.distribution = build_distribution(app_settings, create_session_factory(engine))

    register_exception_handlers(app)
    app.include_router(releases_router)
    app.include_router(subscribers_router)
    app.include_router(config_router)
    app.include_router(downloads_router)

    @app.get("/health")
    def health_check():
        return {"status": "ok"}

    return app


app = create_app()
