from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded

from agentgift.core.config import settings
from agentgift.core.database import SessionLocal, ensure_core_schema
from agentgift.core.log_config import configure_logging
from agentgift.core.module_loader import collect_routers
from agentgift.core.rate_limit import limiter, rate_limit_exceeded_handler
from agentgift.modules.admin.bootstrap import run_bootstraps


logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(title="AgentGift API", version=settings.APP_VERSION)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

    routers = collect_routers()
    # Ensure DB schema is present before routes are registered
    ensure_core_schema()

    for router in routers:
        app.include_router(router)
    logger.info("AgentGift API %s ready with %s routers", settings.APP_VERSION, len(routers))

    @app.on_event("startup")
    def _startup():
        db = SessionLocal()
        try:
            run_bootstraps(db)
        finally:
            db.close()

    return app


app = create_app()
