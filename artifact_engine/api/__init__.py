"""API router for v1 endpoints."""

from fastapi import APIRouter

from artifact_engine.api import artifacts

router = APIRouter()

# Artifact resolution and export routes
router.include_router(artifacts.router, prefix="/artifacts", tags=["artifacts"])
