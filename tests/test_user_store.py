"""Unit tests for auth/store.py -- users and job applications.

Covers:
- register() hashes the password and rejects duplicates
- get() includes applied job ids, get_by_username() includes the hash
- update() re-hashes passwords and rejects unknown / empty fields
- remove() and apply_to_job() error paths
"""

import pytest

from auth.models import User
from auth.tokens import verify_password
from core.errors import BadRequest, NotFound


def _new_user(username: str = "new", is_admin: bool = False) -> User:
    return User(username=username, first_name="Test", last_name="Tester", email="test@test.com", is_admin=is_admin)


class TestRegister:
    def test_register_hashes_password(self, user_store):
        user = user_store.register(_new_user(), "password")
        assert user.username == "new"
        assert user.hashed_password is None
        stored = user_store.get_by_username("new")
        assert stored.hashed_password.startswith("$2")
        assert verify_password("password", stored.hashed_password)

    def test_register_admin(self, user_store):
        user_store.register(_new_user(is_admin=True), "password")
        assert user_store.get("new").is_admin is True

    def test_register_duplicate(self, user_store):
        with pytest.raises(BadRequest):
            user_store.register(_new_user("u1"), "password")


class TestQueries:
    def test_find_all_ordered(self, user_store):
        assert [u.username for u in user_store.find_all()] == ["admin", "u1", "u2"]

    def test_find_all_hides_hashes(self, user_store):
        assert all(u.hashed_password is None for u in user_store.find_all())

    def test_get_with_jobs(self, user_store, job_ids):
        user = user_store.get("u1")
        assert user.first_name == "U1"
        assert user.jobs == [job_ids["j1"]]
        assert user.hashed_password is None

    def test_get_missing(self, user_store):
        with pytest.raises(NotFound):
            user_store.get("nope")

    def test_get_by_username_missing(self, user_store):
        assert user_store.get_by_username("nope") is None


class TestUpdate:
    def test_update_fields(self, user_store):
        user = user_store.update("u1", {"firstName": "NewF", "email": "new@example.com"})
        assert user.first_name == "NewF"
        assert user.email == "new@example.com"
        assert user.last_name == "Test"

    def test_update_password_is_hashed(self, user_store):
        user_store.update("u1", {"password": "new password"})
        stored = user_store.get_by_username("u1")
        assert stored.hashed_password != "new password"
        assert verify_password("new password", stored.hashed_password)

    def test_update_is_admin_rejected(self, user_store):
        with pytest.raises(BadRequest):
            user_store.update("u1", {"isAdmin": True})
        assert user_store.get("u1").is_admin is False

    def test_update_empty(self, user_store):
        with pytest.raises(BadRequest):
            user_store.update("u1", {})

    def test_update_missing(self, user_store):
        with pytest.raises(NotFound):
            user_store.update("nope", {"firstName": "x"})


class TestRemoveAndApply:
    def test_remove(self, user_store):
        user_store.remove("u2")
        with pytest.raises(NotFound):
            user_store.get("u2")

    def test_remove_missing(self, user_store):
        with pytest.raises(NotFound):
            user_store.remove("nope")

    def test_apply(self, user_store, job_ids):
        assert user_store.apply_to_job("u2", job_ids["j2"]) == job_ids["j2"]
        assert user_store.get("u2").jobs == [job_ids["j2"]]

    def test_apply_twice(self, user_store, job_ids):
        with pytest.raises(BadRequest):
            user_store.apply_to_job("u1", job_ids["j1"])

    def test_apply_missing_job(self, user_store):
        with pytest.raises(NotFound):
            user_store.apply_to_job("u1", 0)

    def test_apply_missing_user(self, user_store, job_ids):
        with pytest.raises(NotFound):
            user_store.apply_to_job("nope", job_ids["j1"])

    def test_removing_job_drops_application(self, user_store, board_store, job_ids):
        board_store.remove_job(job_ids["j1"])
        assert user_store.get("u1").jobs == []
