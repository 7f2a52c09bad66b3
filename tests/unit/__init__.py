"""Unit tests for audio2features.

Unit tests should:
- Not require external services (AI providers, PostgreSQL, S3)
- Use stub backends and in-memory SQLite
- Be fast to execute
"""
