"""Core services: logging, AI backends, database and storage."""
