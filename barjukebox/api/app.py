"""FastAPI app, CORS, and route registration."""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Configure logging in the worker process (so coordinator INFO logs are visible with uvicorn --reload)
logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s: %(name)s: %(message)s",
)

from barjukebox.api.routes import blacklist, cooldowns, dj, requests
from barjukebox.api.state import AppState
from barjukebox.config import BARJUKEBOX_WEB_ORIGIN, ensure_data_dir

__all__ = ["create_app"]

logger = logging.getLogger(__name__)


def create_app(state: Optional[AppState] = None) -> FastAPI:
    """Build the API around state (built from env config when None)."""
    if state is None:
        ensure_data_dir()
        state = AppState.from_config()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        state.start()
        logger.info("Jukebox started (%d requests, %d on cooldown, %d blacklisted)",
                    len(state.coordinator.requests),
                    len(state.coordinator.cooldowns),
                    len(state.coordinator.blacklist))
        yield
        state.stop()

    app = FastAPI(
        title="Bar Jukebox API",
        description="Song requests, cooldowns and DJ blacklist",
        lifespan=lifespan,
    )
    app.state.jukebox = state
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[BARJUKEBOX_WEB_ORIGIN] if BARJUKEBOX_WEB_ORIGIN else ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/api/health")
    def health():
        return {"status": "ok"}

    app.include_router(requests.router, prefix="/api/requests", tags=["requests"])
    app.include_router(cooldowns.router, prefix="/api/cooldowns", tags=["cooldowns"])
    app.include_router(blacklist.router, prefix="/api/blacklist", tags=["blacklist"])
    app.include_router(dj.router, prefix="/api/dj", tags=["dj"])
    return app
