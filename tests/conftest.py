from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Make the records_api package importable when running tests from a checkout
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from records_api.core import config as core_config  # noqa: E402

TEST_SECRET = "test-secret-key-for-records-api-suite"


@pytest.fixture()
def data_env(tmp_path, monkeypatch):
    """Point the collections at a temp dir and reset the cached settings."""
    users_file = tmp_path / "users.json"
    posts_file = tmp_path / "posts.json"
    monkeypatch.setenv("USER_DATA_PATH", str(users_file))
    monkeypatch.setenv("POST_DATA_PATH", str(posts_file))
    monkeypatch.setenv("SECRET_KEY", TEST_SECRET)
    for name in ("SMTP_HOST", "SMTP_USER", "SMTP_PASSWORD", "SMTP_FROM", "LOG_FILE"):
        monkeypatch.delenv(name, raising=False)
    core_config.get_settings.cache_clear()

    yield users_file, posts_file

    core_config.get_settings.cache_clear()
