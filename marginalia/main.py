"""Marginalia FastAPI application entry point."""

import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from marginalia.annotations.router import (
    get_annotations_service,
    get_import_service,
    get_store,
)
from marginalia.annotations.router import router as annotations_router
from marginalia.annotations.service import AnnotationsService
from marginalia.db.connection import Database
from marginalia.defaults.service import PersistedDefaultsService
from marginalia.importer.service import ImportAnnotationsService
from marginalia.publisher.base import Publisher
from marginalia.publisher.http import HttpPublisher
from marginalia.publisher.local import LocalPublisher
from marginalia.settings import load_settings
from marginalia.sidebar.router import get_defaults_service
from marginalia.sidebar.router import router as sidebar_router
from marginalia.store import create_sidebar_store


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage database lifecycle and service wiring."""
    load_dotenv(Path.cwd() / ".env")

    settings = load_settings(os.environ.get("MARGINALIA_SETTINGS"))
    store = create_sidebar_store(settings)
    app.dependency_overrides[get_store] = lambda: store

    db = await Database.connect(os.environ.get("MARGINALIA_DB", "marginalia.db"))
    defaults_service = PersistedDefaultsService(db, store)
    await defaults_service.init()
    app.dependency_overrides[get_defaults_service] = lambda: defaults_service

    # Remote publishing service if configured, otherwise local-only
    publisher: Publisher
    publisher_url = os.environ.get("MARGINALIA_PUBLISHER_URL")
    if publisher_url:
        publisher = HttpPublisher.from_url(
            publisher_url,
            store,
            max_retries=int(os.environ.get("MARGINALIA_PUBLISHER_RETRIES", "5")),
        )
    else:
        publisher = LocalPublisher()

    annotations_service = AnnotationsService(publisher, store)
    app.dependency_overrides[get_annotations_service] = lambda: annotations_service

    import_service = ImportAnnotationsService(annotations_service, store)
    app.dependency_overrides[get_import_service] = lambda: import_service

    app.state.store = store
    yield

    if isinstance(publisher, HttpPublisher):
        await publisher.close()
    await defaults_service.flush()
    defaults_service.close()
    await db.close()


app = FastAPI(
    title="Marginalia",
    description="Annotation lifecycle and activity tracking for an annotation sidebar",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(annotations_router)
app.include_router(sidebar_router)


@app.get("/api/health")
async def health() -> dict:
    return {"status": "ok", "version": "0.1.0"}
