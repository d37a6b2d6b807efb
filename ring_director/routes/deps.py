"""Shared lookups for route handlers."""

from fastapi import HTTPException, Request

from ring_director.models import EngineError
from ring_director.pipeline.orchestrator import Show


def get_show(request: Request) -> Show:
    return request.app.state.show


def raise_for(err: EngineError) -> None:
    status = 404 if "not found" in err.error.lower() else 400
    raise HTTPException(status, err.error)
