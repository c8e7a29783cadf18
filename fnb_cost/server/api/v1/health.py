"""Unauthenticated liveness and version probes for load balancers and deploy checks."""

from fastapi import APIRouter

from fnb_cost.server.core import constant

router = APIRouter()


@router.get("/health", summary="Liveness probe")
async def health_check():
    """Answer ``ok`` whenever the process can serve requests; the database is not touched."""
    return {"status": "ok"}


@router.get("/version", summary="Build and schema version")
async def version():
    return {"version": constant.VERSION, "schema_version": constant.SCHEMA_VERSION}
