"""Integration tests driving the HTTP API with stubbed collaborators."""
