"""Thin FastAPI adapter over the booking engine use cases."""
