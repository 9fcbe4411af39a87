import logging
import os
import sys

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from .config import ConfigurationError, Settings, load_service_account
from .config import settings as default_settings
from .database import build_engine, build_session_factory, check_connection, init_db
from .routers import api, pages
from .services.media_locator import MediaLocator, init_firebase
from .templating import STATIC_DIR

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    session_factory: sessionmaker | None = None,
    media_locator: MediaLocator | None = None,
) -> FastAPI:
    """Build the dashboard app around an explicit store and media locator.

    Without a session factory one is built from ``settings.database_url``.
    Without a media locator, video pages render with no playable source.
    """
    settings = settings or default_settings
    if session_factory is None:
        session_factory = build_session_factory(
            build_engine(settings.database_url, settings.request_timeout)
        )

    app = FastAPI(title="Camera Tracker Dashboard", version="0.1.0")
    app.state.settings = settings
    app.state.session_factory = session_factory
    app.state.media_locator = media_locator

    @app.on_event("startup")
    def on_startup():
        init_db(session_factory.kw["bind"])
        logger.info(f"Database OK. Timezone: {settings.timezone}")

    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")
    app.include_router(pages.router)
    app.include_router(api.router)
    return app


def run() -> None:
    """Console entry point: validate config, connect, then serve."""
    import uvicorn

    settings = default_settings
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    os.environ["TZ"] = settings.timezone

    try:
        account = load_service_account(settings.firebase_service_account)
        bucket = init_firebase(account, settings.storage_bucket)
    except (ConfigurationError, ValueError) as e:
        logger.error(f"Invalid configuration: {e}")
        sys.exit(1)

    engine = build_engine(settings.database_url, settings.request_timeout)
    try:
        check_connection(engine)
    except SQLAlchemyError as e:
        logger.error(f"Failed to connect to database: {e}")
        sys.exit(1)

    app = create_app(
        settings,
        session_factory=build_session_factory(engine),
        media_locator=MediaLocator(bucket, settings.video_prefix, settings.request_timeout),
    )
    logger.info(f"Camera Tracker Dashboard running on http://{settings.host}:{settings.port}")
    uvicorn.run(app, host=settings.host, port=settings.port)
