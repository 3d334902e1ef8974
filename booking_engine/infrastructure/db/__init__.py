"""SQLAlchemy Core persistence."""
