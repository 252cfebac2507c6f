from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import Config
from .dispatcher import EventDispatcher
from .registry import RoomRegistry
from .routers import rooms as rooms_router
from .routers import websockets as ws_router

logger = logging.getLogger(__name__)


def configure_logging(config_class=Config) -> None:
    handlers: list = [logging.StreamHandler()]
    if config_class.LOG_FILE:
        handlers.append(logging.FileHandler(config_class.LOG_FILE))
    logging.basicConfig(
        level=config_class.LOG_LEVEL,
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        handlers=handlers,
    )


def create_app(config_class=Config) -> FastAPI:
    configure_logging(config_class)

    registry = RoomRegistry(
        max_players=config_class.MAX_PLAYERS,
        grace_period=config_class.GRACE_PERIOD_SEC,
    )
    dispatcher = EventDispatcher(registry)

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        dispatcher.start()
        logger.info("card room server started (grace period %ss)", config_class.GRACE_PERIOD_SEC)
        yield
        await dispatcher.stop()
        registry.shutdown()
        logger.info("card room server stopped")

    # -----------------------------
    # FastAPI app instance
    # -----------------------------

    app = FastAPI(title="Card Room", lifespan=lifespan)

    # Allow all origins during development – adjust for production.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.config = config_class
    app.state.registry = registry
    app.state.dispatcher = dispatcher

    # Register routers
    app.include_router(rooms_router.router)
    app.include_router(ws_router.router)

    return app


app = create_app()

__all__ = ["app", "create_app", "configure_logging"]
