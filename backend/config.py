from datetime import UTC, datetime
from pathlib import Path

from pydantic_settings import BaseSettings

BACKEND_DIR = Path(__file__).resolve().parent


def utcnow() -> datetime:
    """Return the current UTC time as a naive datetime.

    Keeps datetimes naive so they stay compatible with SQLite (which doesn't
    store tz info) and with snapshots written by earlier versions.
    """
    return datetime.now(UTC).replace(tzinfo=None)


class Settings(BaseSettings):
    app_name: str = "Hebrew Quiz"
    database_url: str = f"sqlite+aiosqlite:///{BACKEND_DIR.parent / 'data' / 'hebrew_quiz.db'}"
    vocab_path: Path = BACKEND_DIR / "vocab" / "data" / "vocab.seed.json"
    data_version: str = "2.0.0"  # bump to ignore snapshots written by older schemas
    persist_debounce_seconds: float = 1.0
    default_session_size: int = 12
    option_count: int = 4
    level_pass_accuracy: int = 80
    debug: bool = False

    model_config = {"env_prefix": "HEBREW_QUIZ_", "env_file": ".env"}


settings = Settings()
