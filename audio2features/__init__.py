"""audio2features: audio feedback to structured feature requests."""

__version__ = "0.1.0"
