from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Core imports
from packages.mm_core.errors import MockMateError
from packages.mm_core.logging import get_logger, setup_logging

# API Routers
from MockMate.api.dependencies import get_config
from MockMate.api.feedback import router as feedback_router
from MockMate.api.health import router as health_router
from MockMate.api.interviews import router as interviews_router
from MockMate.api.schedule import router as schedule_router
from MockMate.api.session import router as session_router
from MockMate.core.error_handler import mockmate_exception_handler

# Configuration Load
config = get_config()
logger = get_logger("mockmate.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    setup_logging(log_dir=config.LOG_DIR, level=config.LOG_LEVEL)
    logger.info(
        f"Starting {config.PROJECT_NAME} v{config.VERSION} "
        f"(transport={config.VOICE_TRANSPORT}, store={config.STORE_BACKEND})"
    )

    yield

    # Shutdown
    logger.info("Server shutting down...")


def create_app() -> FastAPI:
    app = FastAPI(
        title=config.PROJECT_NAME,
        version=config.VERSION,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url=None
    )

    # Middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(MockMateError, mockmate_exception_handler)

    # Routers
    app.include_router(health_router, prefix="", tags=["Status"])
    app.include_router(session_router, prefix="/api/v1")
    app.include_router(feedback_router, prefix="/api/v1")
    app.include_router(interviews_router, prefix="/api/v1")
    app.include_router(schedule_router, prefix="/api/v1")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("MockMate.main:app", host="0.0.0.0", port=8000, reload=True)
