"""
Main Application - Apparel MES Reports API

FastAPI application serving the production reports, global search,
dashboard metrics and entry lookup, behind the session-cookie guard.
"""

# ============================================================================
# IMPORTS
# ============================================================================
import logging
from datetime import datetime
from typing import Optional
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request, Depends
from fastapi.middleware.cors import CORSMiddleware

from .config import config, setup_logging
from .auth import SessionUser, require_auth
from .errors import register_error_handlers
from .database_adapter import DatabaseAdapter, SQLiteAdapter, get_database_adapter
from .database_schema import ensure_schema
from .reports import reports_router
from .reports.models import UserInfo, HealthStatus

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the database adapter on startup unless one was injected"""
    if getattr(app.state, "db_adapter", None) is None:
        adapter = get_database_adapter()
        if isinstance(adapter, SQLiteAdapter):
            ensure_schema(adapter)
        app.state.db_adapter = adapter
        logger.info(f"Database adapter ready: {type(adapter).__name__}")

    yield

    logger.info("Application shutdown")


def create_app(adapter: Optional[DatabaseAdapter] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        adapter: Database adapter to use; when omitted one is created from
            configuration during startup
    """
    app = FastAPI(
        title="Apparel MES Reports",
        description="Production reports, search and dashboard metrics for the shop floor",
        version="1.0.0",
        lifespan=lifespan
    )
    app.state.db_adapter = adapter

    # Add request logging middleware
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log requests with status and duration"""
        start_time = datetime.now()
        response = await call_next(request)
        duration = (datetime.now() - start_time).total_seconds()

        if request.url.path != "/api/health":
            query_string = f"?{request.url.query}" if request.url.query else ""
            message = (f"{request.method} {request.url.path}{query_string} - "
                       f"Status: {response.status_code} - Duration: {duration:.3f}s")
            if response.status_code >= 500:
                logger.error(message)
            elif response.status_code == 401:
                logger.debug(message)
            elif response.status_code >= 400:
                logger.warning(message)
            else:
                logger.info(message)
        return response

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.web.cors_origins,
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    register_error_handlers(app)
    app.include_router(reports_router)

    @app.get("/api/health", response_model=HealthStatus)
    def health_check(request: Request):
        """Liveness check including a trivial database round trip"""
        database = "connected"
        try:
            request.app.state.db_adapter.fetchone("SELECT 1 AS ok")
        except Exception as e:
            logger.error(f"Health check database error: {e}")
            database = "error"
        return {
            "status": "healthy" if database == "connected" else "degraded",
            "database": database,
            "timestamp": datetime.now().isoformat(),
        }

    @app.get("/api/me", response_model=UserInfo)
    def me(user: SessionUser = Depends(require_auth)):
        """Identity carried by the session cookie"""
        return user.to_dict()

    return app


app = create_app()


# ============================================================================
# MAIN APPLICATION ENTRY POINT
# ============================================================================

def main():
    """Run the API server with uvicorn"""
    setup_logging()
    uvicorn.run(
        "mes.app:app",
        host=config.web.host,
        port=config.web.port,
        reload=config.web.reload,
        log_level=config.web.log_level
    )


if __name__ == "__main__":
    main()
