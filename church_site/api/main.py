import logging
import os
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from church_site.adapters.sqlite.migrator import SQLiteMigrator
from church_site.api.deps import close_adapters, get_settings
from church_site.rules.loader import load_rules

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    settings = get_settings()

    # Load rules and validate on startup (fail-fast)
    try:
        load_rules(settings.rules_path)
        logger.info("Rules loaded from %s", settings.rules_path)
    except (FileNotFoundError, ValueError) as e:
        logger.critical("Rules load failed: %s", e)
        sys.exit(1)

    os.makedirs(settings.data_dir, exist_ok=True)
    SQLiteMigrator(settings.db_path).run_migrations()

    yield

    close_adapters()


app = FastAPI(
    title="Church Site API",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# --- Routers ---
from church_site.api.routes import (  # noqa: E402
    admin_admins,
    admin_newsletter,
    admin_posts,
    auth,
    public_newsletter,
    public_posts,
)

app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])
app.include_router(admin_admins.router, prefix="/api/admin/admins", tags=["Admin Admins"])
app.include_router(admin_posts.router, prefix="/api/admin/posts", tags=["Admin Posts"])
app.include_router(
    admin_newsletter.router, prefix="/api/admin/newsletter", tags=["Admin Newsletter"]
)
app.include_router(public_posts.router, prefix="/api/public", tags=["Public"])
app.include_router(
    public_newsletter.router, prefix="/api/public/newsletter", tags=["Public Newsletter"]
)


# CORS (Allow Frontend)
origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health_check() -> dict[str, Any]:
    """Health check endpoint."""
    return {"status": "ok", "service": "api"}
