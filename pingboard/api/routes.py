"""API routes for the endpoint monitor.

Endpoints:
  POST /api/endpoint        — register (or replace) an endpoint, checks it right away
  GET  /api/status          — status of every endpoint, keyed by name
  GET  /api/status/{name}   — status of a single endpoint
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from pingboard.monitor.models import Endpoint
from pingboard.monitor.scheduler import MonitorScheduler
from pingboard.monitor.store import MonitorStore

logger = logging.getLogger(__name__)

monitor_router = APIRouter()


class RegisterEndpointBody(BaseModel):
    name: str
    url: str


# ── Helpers ──────────────────────────────────────────────────────────────────


def _get_store(request: Request) -> MonitorStore:
    return request.app.state.monitor_store  # type: ignore[no-any-return]


def _get_scheduler(request: Request) -> MonitorScheduler:
    return request.app.state.monitor_scheduler  # type: ignore[no-any-return]


# ── Routes ───────────────────────────────────────────────────────────────────


@monitor_router.post("/endpoint", status_code=201)
def register_endpoint(body: RegisterEndpointBody, request: Request) -> dict[str, Any]:
    """Store the endpoint, reset its status to Pending and queue a first check."""
    endpoint = Endpoint(name=body.name, url=body.url)
    _get_store(request).register(endpoint)
    _get_scheduler(request).check_now(endpoint.name)
    return endpoint.to_dict()


@monitor_router.get("/status")
def get_status(request: Request) -> dict[str, Any]:
    return {name: s.to_dict() for name, s in _get_store(request).snapshot_all().items()}


@monitor_router.get("/status/{name}")
def get_endpoint_status(name: str, request: Request) -> dict[str, Any]:
    status = _get_store(request).get_status(name)
    if status is None:
        raise HTTPException(status_code=404, detail=f"Endpoint not found: {name}")
    return status.to_dict()
