# tests/conftest.py
"""
Global test bootstrap
- Points the app at in-memory SQLite (no Postgres needed)
- Turns rate limiting off and keeps log files out of the working tree
- Pulls in the shared fixtures (db, app, users, catalog)
"""

from __future__ import annotations

import os
import warnings

from sqlalchemy.exc import SAWarning

# ──────────────────────────────────────────────────────────────────────────────
# 🌱 Test env (set BEFORE importing the app so module-level settings see it)
# ──────────────────────────────────────────────────────────────────────────────
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["ENVIRONMENT"] = "test"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["LOG_TO_FILE"] = "0"
os.environ.setdefault("LOG_LEVEL", "WARNING")

# SQLite has no native DECIMAL; the rating column is read back as float anyway
warnings.filterwarnings("ignore", category=SAWarning, message=r".*Dialect sqlite\+aiosqlite does \*not\* support Decimal.*")

# ──────────────────────────────────────────────────────────────────────────────
# 📦 Fixtures
# ──────────────────────────────────────────────────────────────────────────────
from tests.fixtures.db import *       # noqa: E402,F401,F403
from tests.fixtures.app import *      # noqa: E402,F401,F403
from tests.fixtures.users import *    # noqa: E402,F401,F403
from tests.fixtures.catalog import *  # noqa: E402,F401,F403
