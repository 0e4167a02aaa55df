import logging
from typing import Optional

from fastapi import FastAPI, HTTPException, Response
from pydantic import BaseModel

from .cache import create_cache
from .config import settings
from .fetcher import HttpxFetcher
from .models import PROPERTY_KEYS
from .notify import create_notifier
from .pipeline import CLEAR_CACHE_FLAG, FeedPipeline
from .properties import InMemoryPropertyStore

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


class PropertyPayload(BaseModel):
    value: str


app = FastAPI(
    title="ICS Feed",
    version="0.1.0",
    description="Serves a calendar feed as enriched, cached JSON.",
)

properties = InMemoryPropertyStore(settings.initial_properties())
pipeline = FeedPipeline(
    properties,
    create_cache(settings.cache_backend, settings.cache_path),
    HttpxFetcher(timeout_seconds=settings.fetch_timeout_seconds),
    notifier=create_notifier(settings.smtp_host, settings.smtp_port, settings.smtp_sender),
)


@app.get("/health")
async def health() -> dict:
    return {"status": "ok"}


@app.get("/feed")
def feed() -> Response:
    return Response(content=pipeline.serve(), media_type="application/json")


@app.get("/feed/status")
async def feed_status() -> dict:
    last_run: Optional[dict] = None
    if pipeline.last_result:
        last_run = pipeline.last_result.model_dump(mode="json")
    return {"last_run": last_run}


@app.post("/cache/clear")
async def clear_cache() -> dict:
    properties.set(CLEAR_CACHE_FLAG, "true")
    return {"status": "scheduled"}


@app.get("/properties")
async def list_properties() -> dict:
    return {"properties": properties.snapshot()}


@app.put("/properties/{key}")
async def set_property(key: str, payload: PropertyPayload) -> dict:
    """Update a runtime property.

    Unauthenticated: anyone who can reach this endpoint can repoint ICS_URL,
    so keep it behind the deployment's own access control. Only the
    recognized configuration keys can be written.
    """
    if key not in PROPERTY_KEYS:
        raise HTTPException(status_code=400, detail=f"Unknown property '{key}'")
    properties.set(key, payload.value)
    return {"key": key, "value": payload.value}
