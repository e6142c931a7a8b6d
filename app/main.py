import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import Settings, get_settings
from app.dependencies.services import build_services
from app.routers import auth, rooms, ws
from app.services.game.dice import DieSource

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    services = app.state.services
    logger.info("Starting Ludo API")
    logger.debug("Debug mode: %s", services.settings.DEBUG)

    # Start stale connection cleanup
    await services.manager.start_cleanup_task()
    logger.info("WebSocket connection manager initialized")

    yield

    # Shutdown: stop cleanup task, close all connections, cancel pending turn transitions
    logger.info("Shutting down Ludo API")
    await services.manager.stop_cleanup_task()
    await services.manager.close_all_connections()
    await services.coordinator.shutdown()
    logger.info("WebSocket and match cleanup complete")


def create_app(settings: Settings | None = None, die: DieSource | None = None) -> FastAPI:
    """Build the application with its own, freshly constructed services."""
    settings = settings or get_settings()

    app = FastAPI(
        title="Ludo API",
        lifespan=lifespan,
    )
    app.state.services = build_services(settings, die=die)
    app.state.rate_limiter = ws.RateLimiter(settings.WS_MAX_MESSAGES_PER_SECOND)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    logger.debug("CORS configured with origins: %s", settings.CORS_ORIGINS)

    app.include_router(auth.router, prefix="/api/v1")
    app.include_router(rooms.router, prefix="/api/v1")
    app.include_router(ws.router, prefix="/api/v1")
    logger.debug("Routers registered: /api/v1/auth, /api/v1/rooms, /api/v1/ws")

    @app.get("/")
    def root():
        return {"message": "Ludo API"}

    @app.get("/health")
    def health():
        return {"status": "healthy"}

    return app


app = create_app()
