"""Root conftest — shared test configuration."""

import os
import tempfile

# Settings are cached on first use: defaults must exist before app import
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///test.db")
os.environ.setdefault("JWT_SECRET", "test-secret-not-for-production")
os.environ.setdefault(
    "UPLOAD_ROOT", os.path.join(tempfile.gettempdir(), "throwback-test-uploads"),
)
