from booking_engine.config import get_settings
from booking_engine.infrastructure.db.engine import build_engine, build_sessionmaker

settings = get_settings()

# Fall back to an in-process SQLite database when no URL is configured.
engine = build_engine(
    settings.model_copy(
        update={"database_url": settings.database_url or "sqlite+aiosqlite:///:memory:"}
    )
)
AsyncSessionLocal = build_sessionmaker(engine)
