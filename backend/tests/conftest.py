"""Root conftest — shared test configuration."""

import os

# Tests never reach a real RPC endpoint or an on-disk database
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("LOG_FORMAT", "text")
