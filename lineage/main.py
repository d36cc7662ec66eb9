"""
Public Business lineage service - FastAPI app

Run:
    uvicorn lineage.main:app --host 0.0.0.0 --port 8000
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api import posts, relations
from .config import get_settings, create_postgres_pool, run_migrations
from .repositories import PostRepository, RelationRepository
from .services import LineageService, TraversalLimits

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s [%(name)s] %(levelname)s: %(message)s'
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: services injected by create_app() need no database
    pool = None
    if getattr(app.state, 'lineage', None) is None:
        pool = await create_postgres_pool(get_settings())
        await run_migrations(pool)
        app.state.lineage = LineageService(
            PostRepository(pool),
            RelationRepository(pool),
            TraversalLimits.from_settings(),
        )
        logger.info("✅ Lineage service ready (PostgreSQL)")
    yield
    # Shutdown
    if pool is not None:
        await pool.close()


def create_app(service: Optional[LineageService] = None) -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Public Business Lineage",
        description="Post relation graph: threads, breadcrumbs, orbits and clusters",
        version="0.3.0",
        lifespan=lifespan,
    )
    app.state.lineage = service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(posts.router)
    app.include_router(relations.router)

    @app.get("/health")
    async def health():
        return {"status": "ok", "environment": settings.environment}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
