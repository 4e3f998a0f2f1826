"""FastAPI application serving search over a guarded index."""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Any, List

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ValidationError

from docindex.config import AppConfig
from docindex.index.indexer import Indexer
from docindex.index.service import IndexService
from docindex.web.frontend import router as frontend_router

LOGGER = logging.getLogger(__name__)


class SearchPayload(BaseModel):
    query: str
    top_k: int | None = None


class DeleteDocumentRequest(BaseModel):
    path: str


async def _read_search_payload(request: Request) -> SearchPayload:
    body = await request.body()
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            return SearchPayload.model_validate(json.loads(body or b"null"))
        except (json.JSONDecodeError, ValidationError) as exc:
            raise HTTPException(status_code=422, detail=f"Invalid search payload: {exc}")
    try:
        return SearchPayload(query=body.decode("utf-8"))
    except UnicodeDecodeError:
        raise HTTPException(status_code=400, detail="Query must be UTF-8 text")


def create_app(
    service: IndexService,
    config: AppConfig | None = None,
    *,
    indexer: Indexer | None = None,
    root: Path | None = None,
) -> FastAPI:
    """Build the web app around ``service``.

    ``indexer`` and ``root`` enable ``POST /api/reindex``.
    """
    config = config or AppConfig()

    app = FastAPI(title="docindex", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(frontend_router)
    app.state.service = service
    app.state.config = config
    app.state.indexer = indexer
    app.state.root = root

    @app.on_event("startup")
    async def startup_event() -> None:
        logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")

    @app.post("/api/search")
    async def search_documents(request: Request) -> List[dict[str, Any]]:
        payload = await _read_search_payload(request)
        query = payload.query.strip()
        if not query:
            raise HTTPException(status_code=400, detail="Empty query")

        limit = config.result_limit
        top_k = max(1, min(payload.top_k or limit, limit))
        LOGGER.info("Query string: %s", query)
        results = await asyncio.to_thread(service.search, query, top_k=top_k)
        return [asdict(result) for result in results]

    @app.get("/api/stats")
    async def index_stats() -> dict[str, int]:
        stats = await asyncio.to_thread(service.stats)
        return {"docs_count": stats.document_count, "terms_count": stats.term_count}

    @app.post("/api/documents/delete")
    async def delete_document(payload: DeleteDocumentRequest) -> dict[str, Any]:
        deleted = await asyncio.to_thread(service.remove_document, payload.path)
        if not deleted:
            raise HTTPException(status_code=404, detail=f"Document not found: {payload.path}")
        return {"status": "ok", "path": payload.path}

    @app.post("/api/reindex")
    async def reindex() -> dict[str, Any]:
        if app.state.indexer is None or app.state.root is None:
            raise HTTPException(status_code=409, detail="No document folder configured")
        try:
            stats = await asyncio.to_thread(app.state.indexer.crawl, app.state.root, wait=False)
        except Exception as exc:  # pragma: no cover - defensive
            LOGGER.exception("Indexing failed: %s", exc)
            raise HTTPException(status_code=500, detail=str(exc)) from exc
        if stats is None:
            raise HTTPException(status_code=409, detail="A crawl is already running")
        return {"status": "ok", "stats": stats.as_dict()}

    return app
