import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from headless_cms.adapters.plugins import DirectoryPluginLoader
from headless_cms.adapters.sqlite.migrator import SQLiteMigrator
from headless_cms.api.errors import install_error_handlers
from headless_cms.api.routes import content_items, content_types, rules
from headless_cms.components.rules import RuleSourcePort, init_registries, reset_registries
from headless_cms.settings.loader import load_settings
from headless_cms.settings.models import Settings

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(level=settings.logging.level, format=settings.logging.format)


def prepare_database(settings: Settings) -> None:
    Path(settings.database.path).parent.mkdir(parents=True, exist_ok=True)
    SQLiteMigrator(settings.database.path, settings.database.migrations_dir).run_migrations()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    settings: Settings = app.state.settings
    configure_logging(settings)

    # Registries must be complete before the first request (fail-fast)
    try:
        prepare_database(settings)
        loader: RuleSourcePort = DirectoryPluginLoader(settings.plugins.directories)
        registries = init_registries(loader.load_sources())
    except Exception:
        logger.critical("Startup failed", exc_info=True)
        raise

    logger.info(
        "Ready: %d validation and %d transformation rule types",
        len(registries.validation.list_registered_types()),
        len(registries.transformation.list_registered_types()),
    )
    yield
    reset_registries()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the API application. Loads cms.yaml when no settings are given."""
    app = FastAPI(
        title="Headless CMS API",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.settings = settings or load_settings()

    install_error_handlers(app)
    app.include_router(content_types.router, prefix="/api/content-types", tags=["Content Types"])
    app.include_router(content_items.router, prefix="/api/content-items", tags=["Content Items"])
    app.include_router(rules.router, prefix="/api/rules", tags=["Rules"])

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app.state.settings.api.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    def health_check() -> dict[str, Any]:
        """Health check endpoint."""
        return {"status": "ok", "service": "api"}

    return app
