"""Tests for the administration CLI."""

from airport.cli import main
from airport.persistence.db_manager import DatabaseManager
from airport.persistence.repositories.user_repo import UserRepository


def _users(db_path):
    manager = DatabaseManager()
    manager.use_local(db_path)
    return UserRepository(manager)


def test_init_db(tmp_path):
    db_path = tmp_path / "airport.db"
    assert main(["init-db", "--db", str(db_path)]) == 0
    assert db_path.exists()


def test_create_admin(tmp_path):
    db_path = tmp_path / "airport.db"
    args = ["create-admin", "--db", str(db_path), "--email", "admin@example.com",
            "--username", "admin", "--password", "secret123"]
    assert main(args) == 0

    user = _users(db_path).authenticate("admin@example.com", "secret123")
    assert [r.role_name for r in user.roles] == ["admin"]

    # Second run hits the unique username
    assert main(args) == 1


def test_create_admin_rejects_short_password(tmp_path):
    db_path = tmp_path / "airport.db"
    args = ["create-admin", "--db", str(db_path), "--email", "admin@example.com",
            "--username", "admin", "--password", "123"]
    assert main(args) == 1
