"""SQLAlchemy Core implementations of the repository ports."""
