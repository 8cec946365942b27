"""FastAPI application factory exposing the link store as a local JSON API."""

from __future__ import annotations

import secrets
from typing import Any, Callable

from fastapi import Depends, FastAPI, Header, HTTPException, Request, Response, status
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import BaseModel, Field

from linkshelf.config.app import AppConfig
from linkshelf.config.utils import resolve_env_reference
from linkshelf.config.web import WebAuthConfig
from linkshelf.errors import NotFoundError, ValidationError
from linkshelf.store.models import Candidate, LinkInput
from linkshelf.store.service import LinkStore


class LinkPayload(BaseModel):
    title: str
    url: str
    description: str = ""
    version: str | None = None

    def to_input(self) -> LinkInput:
        return LinkInput(
            title=self.title,
            url=self.url,
            description=self.description,
            version=self.version,
        )


class ReorderPayload(BaseModel):
    dragged_id: str = Field(min_length=1)
    target_id: str = Field(min_length=1)


class ReconcilePayload(BaseModel):
    candidates: list[LinkPayload]


def create_app(store: LinkStore, config: AppConfig | None = None) -> FastAPI:
    """Creates the API around an already initialised :class:`LinkStore`.

    Handlers are coroutines so every store call runs on the event loop, one
    at a time.
    """
    web_config = config.web if config and config.web else None
    auth_config = web_config.auth if web_config and web_config.auth else None
    auth_dependency = _build_auth_dependency(auth_config)

    app = FastAPI(
        title=web_config.title if web_config else "Linkshelf",
        description="Local API for managing and importing links.",
        version="0.1.0",
    )

    @app.exception_handler(NotFoundError)
    async def _not_found(_: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})

    @app.exception_handler(ValidationError)
    async def _invalid(_: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": exc.message, "field": exc.field})

    @app.get("/health", summary="Health Check", tags=["Monitoring"])
    async def health_check() -> dict[str, Any]:
        """Check if the API is running."""
        return {"status": "ok", "links": len(store)}

    @app.get("/links", summary="List links in display order", tags=["Links"])
    async def list_links(_: None = Depends(auth_dependency)) -> list[dict[str, Any]]:
        return [link.to_record() for link in store.list()]

    @app.get("/links/{link_id}", summary="Get one link", tags=["Links"])
    async def get_link(link_id: str, _: None = Depends(auth_dependency)) -> dict[str, Any]:
        link = store.get(link_id)
        if link is None:
            raise NotFoundError(link_id)
        return link.to_record()

    @app.post("/links", status_code=status.HTTP_201_CREATED, summary="Add a link", tags=["Links"])
    async def add_link(payload: LinkPayload, _: None = Depends(auth_dependency)) -> dict[str, Any]:
        return store.add(payload.to_input()).to_record()

    @app.put("/links/{link_id}", summary="Edit a link", tags=["Links"])
    async def update_link(
        link_id: str, payload: LinkPayload, _: None = Depends(auth_dependency)
    ) -> dict[str, Any]:
        link = store.update(link_id, payload.to_input())
        if link is None:
            raise NotFoundError(link_id)
        return link.to_record()

    @app.delete(
        "/links/{link_id}",
        status_code=status.HTTP_204_NO_CONTENT,
        summary="Delete a link",
        tags=["Links"],
    )
    async def delete_link(link_id: str, _: None = Depends(auth_dependency)) -> Response:
        store.delete(link_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @app.post("/links/reorder", summary="Move a link into the position of another", tags=["Links"])
    async def reorder_links(payload: ReorderPayload, _: None = Depends(auth_dependency)) -> dict[str, Any]:
        moved = store.reorder(payload.dragged_id, payload.target_id)
        return {"moved": moved, "links": [link.to_record() for link in store.list()]}

    @app.post("/links/reconcile", summary="Merge a batch of candidates", tags=["Import"])
    async def reconcile_links(payload: ReconcilePayload, _: None = Depends(auth_dependency)) -> dict[str, int]:
        candidates = [
            Candidate(
                title=item.title,
                url=item.url,
                description=item.description,
                version=item.version,
            )
            for item in payload.candidates
        ]
        result = store.batch_reconcile(candidates)
        logger.info("Reconciled {} candidates via API", len(candidates))
        return {"added": result.added, "updated": result.updated, "skipped": result.skipped}

    return app


def _build_auth_dependency(auth_config: WebAuthConfig | None) -> Callable[..., Any]:
    """Dependency enforcing ``auth_config``; a no-op when auth is off."""

    async def _open() -> None:
        return None

    if auth_config is None or not auth_config.enabled:
        return _open

    expected = resolve_env_reference(auth_config.token) or ""

    async def _require_token(
        token: str | None = Header(default=None, alias=auth_config.header_name),
    ) -> None:
        if token is None or not secrets.compare_digest(token, expected):
            reason = "Missing" if token is None else "Invalid"
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail=f"{reason} authentication token.",
            )

    return _require_token


__all__ = ["create_app"]
