import os
import tempfile
from pathlib import Path

# Point the app at a throwaway database before backend.config is imported.
_tmp_dir = Path(tempfile.mkdtemp(prefix="hebrew_quiz_test_"))
os.environ.setdefault("HEBREW_QUIZ_DATABASE_URL", f"sqlite+aiosqlite:///{_tmp_dir / 'test.db'}")
