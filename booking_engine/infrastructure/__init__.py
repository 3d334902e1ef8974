"""Adapters for the application ports."""
