# =======================================================================================
# gatepass/main.py - FastAPI Application Entry Point
# =======================================================================================
from typing import Optional
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError
from .config import Config
from .api.routes.passes import router as passes_router
from .api.routes.redeem import router as redeem_router
from .database import DatabaseManager
from .models.schemas import HealthResponse
from .services.registry import PassRegistry
from .services.pass_service import PassService
from .utils.logger import get_logger, setup_logger

logger = get_logger(__name__)


def create_app(config: Optional[Config] = None) -> FastAPI:
    config = config or Config()
    setup_logger(config.log_level)

    app = FastAPI(
        title="GatePass API",
        version="1.0.0",
        description="Single-use, time-scoped access passes with at-most-once redemption",
        debug=config.API_DEBUG,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routers
    app.include_router(passes_router, prefix="/api", tags=["passes"])
    app.include_router(redeem_router, prefix="/api", tags=["redeem"])

    app.state.config = config
    app.state.db = None
    app.state.pass_service = None

    @app.get("/api/health", response_model=HealthResponse, tags=["health"])
    def api_health():
        db = app.state.db
        if db is None or not db.connected:
            return HealthResponse(status="error", dataAvailable=False, message="Database not connected")
        try:
            db.ping()
            return HealthResponse(status="ok", dataAvailable=True, message=None)
        except SQLAlchemyError as e:
            return HealthResponse(status="error", dataAvailable=False, message=str(e))

    @app.on_event("startup")
    def startup_event():
        db = DatabaseManager(config).connect()
        if config.DB_INIT_SCHEMA:
            db.init_schema()
        app.state.db = db
        app.state.pass_service = PassService(PassRegistry(db), config)
        logger.info("GatePass API started %s", config.describe())

    @app.on_event("shutdown")
    def shutdown_event():
        if app.state.db is not None:
            app.state.db.close()
        app.state.db = None
        app.state.pass_service = None

    return app


app = create_app()
