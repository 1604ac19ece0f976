"""Unit tests for main.py -- administrative command line.

Covers:
- init-db creates the schema at DATABASE_URL
- create-admin registers an admin and rejects duplicates / bad passwords
- issue-token prints a credential that decodes to the stored user
"""

import pytest

import main
from auth.store import UserStore
from auth.tokens import decode_token
from core.config import get_settings
from core.db import make_engine


@pytest.fixture
def db_url(tmp_path, monkeypatch):
    url = f"sqlite:///{tmp_path / 'cli.db'}"
    monkeypatch.setenv("DATABASE_URL", url)
    get_settings.cache_clear()
    yield url
    get_settings.cache_clear()


def _create_admin(password: str = "password1") -> int:
    return main.main(
        [
            "create-admin",
            "boss",
            "--email",
            "boss@example.com",
            "--first-name",
            "Big",
            "--last-name",
            "Boss",
            "--password",
            password,
        ]
    )


def test_init_db(db_url, capsys):
    assert main.main(["init-db"]) == 0
    assert "Tables ready" in capsys.readouterr().out


def test_create_admin(db_url):
    assert _create_admin() == 0
    engine = make_engine(db_url)
    try:
        assert UserStore(engine).get("boss").is_admin is True
    finally:
        engine.dispose()


def test_create_admin_duplicate(db_url, capsys):
    assert _create_admin() == 0
    assert _create_admin() == 1
    assert "Duplicate username" in capsys.readouterr().out


def test_create_admin_short_password(db_url):
    assert _create_admin(password="abc") == 1


def test_issue_token(db_url, capsys):
    _create_admin()
    capsys.readouterr()
    assert main.main(["issue-token", "boss", "--expires", "60"]) == 0
    token = capsys.readouterr().out.strip()
    identity = decode_token(token, get_settings().secret_key)
    assert identity is not None
    assert identity.username == "boss"
    assert identity.is_admin is True


def test_issue_token_unknown_user(db_url):
    assert main.main(["issue-token", "ghost"]) == 1
