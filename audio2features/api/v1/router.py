"""Main API router aggregator."""

from fastapi import APIRouter

from audio2features.api.v1 import audio

api_router = APIRouter()

api_router.include_router(audio.router, tags=["audio"])
