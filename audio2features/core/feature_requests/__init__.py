"""Persisted audio files and extracted feature requests."""

from audio2features.core.feature_requests.models import AudioFile, FeatureRequest

__all__ = ["AudioFile", "FeatureRequest"]
