"""Repository for user accounts and their role assignments."""

from __future__ import annotations

import logging
import sqlite3
from typing import Any

from airport.contracts.common import Page
from airport.contracts.enums import AuditAction
from airport.contracts.user import Role, User, UserSearch
from airport.persistence.db_manager import DatabaseManager
from airport.persistence.repositories.base import BaseRepository, record_audit
from airport.persistence.sql import Filters
from airport.services.errors import NotFoundError
from airport.services.security import hash_password, verify_password

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    """Users never expose ``password_hash``; it is written from ``password``."""

    table = "users"
    key = "user_id"
    label = "User"
    alias = "u"
    select_sql = "SELECT u.* FROM users u"
    default_order = "u.username"
    sort_columns = {
        "username": "u.username",
        "email": "u.email",
        "last_name": "u.last_name",
        "created_at": "u.created_at",
    }
    unique = [
        (("username",), "Username already exists"),
        (("email",), "Email already exists"),
    ]
    redacted = frozenset({"password_hash"})

    def __init__(self, manager: DatabaseManager):
        super().__init__(User, manager)

    @staticmethod
    def _hash(values: dict[str, Any]) -> dict[str, Any]:
        values = dict(values)
        password = values.pop("password", None)
        if password is not None:
            values["password_hash"] = hash_password(password)
        return values

    def create(self, values: dict[str, Any], actor_id: int | None = None) -> User:
        return super().create(self._hash(values), actor_id)

    def update(self, record_id: int, values: dict[str, Any], actor_id: int | None = None) -> User:
        return super().update(record_id, self._hash(values), actor_id)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def search(self, query: UserSearch) -> Page[dict]:
        filters = (
            Filters()
            .like_any(["u.username", "u.email", "u.first_name", "u.last_name"], query.q)
            .equals("u.is_active", query.is_active)
        )
        return self._page(filters, query)

    def by_username(self, username: str) -> User | None:
        return self.find_one("username", username)

    def by_email(self, email: str) -> User | None:
        return self.find_one("email", email)

    def by_status(self, is_active: bool) -> list[User]:
        with self._manager.transaction() as conn:
            return self._many(conn, "u.is_active = ?", (int(is_active),))

    def with_roles(self) -> list[User]:
        """Every user with their roles attached."""
        with self._manager.transaction() as conn:
            users = self._many(conn, "1 = 1", ())
            rows = conn.execute(
                "SELECT ur.user_id, r.* FROM user_roles ur JOIN roles r ON r.role_id = ur.role_id "
                "ORDER BY r.role_name"
            ).fetchall()
        by_user: dict[int, list[Role]] = {}
        for row in rows:
            by_user.setdefault(row["user_id"], []).append(Role.from_row(row))
        for user in users:
            user.roles = by_user.get(user.user_id, [])
        return users

    def get_with_roles(self, user_id: int) -> User:
        user = self.require(user_id)
        user.roles = self.roles_of(user_id)
        return user

    # ------------------------------------------------------------------
    # Activation and deletion
    # ------------------------------------------------------------------

    def set_active(self, user_id: int, is_active: bool, actor_id: int | None = None) -> User:
        with self._manager.transaction() as conn:
            current = self._require(conn, user_id)
            if bool(current["is_active"]) != is_active:
                self._apply(conn, current, {"is_active": is_active}, actor_id, AuditAction.STATUS_CHANGE)
                logger.info("User %s %s", current["username"], "activated" if is_active else "deactivated")
            return self._load(conn, user_id)

    def remove(self, user_id: int, hard: bool = False, actor_id: int | None = None) -> None:
        """Soft delete (deactivate) by default; *hard* removes the row."""
        if hard:
            self.delete(user_id, actor_id)
        else:
            self.set_active(user_id, False, actor_id)

    # ------------------------------------------------------------------
    # Roles
    # ------------------------------------------------------------------

    def list_roles(self) -> list[Role]:
        with self._manager.transaction() as conn:
            rows = conn.execute("SELECT * FROM roles ORDER BY role_name").fetchall()
        return [Role.from_row(r) for r in rows]

    def roles_of(self, user_id: int) -> list[Role]:
        with self._manager.transaction() as conn:
            self._require(conn, user_id)
            return self._roles(conn, user_id)

    def _roles(self, conn: sqlite3.Connection, user_id: int) -> list[Role]:
        rows = conn.execute(
            "SELECT r.* FROM roles r JOIN user_roles ur ON ur.role_id = r.role_id "
            "WHERE ur.user_id = ? ORDER BY r.role_name",
            (user_id,),
        ).fetchall()
        return [Role.from_row(r) for r in rows]

    def assign_role(self, user_id: int, role_id: int, actor_id: int | None = None) -> bool:
        """Grant a role. Returns False when the user already holds it."""
        with self._manager.transaction() as conn:
            self._require(conn, user_id)
            if conn.execute("SELECT 1 FROM roles WHERE role_id = ?", (role_id,)).fetchone() is None:
                raise NotFoundError("Role not found")
            return self._grant(conn, user_id, role_id, actor_id)

    @staticmethod
    def _grant(conn: sqlite3.Connection, user_id: int, role_id: int, actor_id: int | None) -> bool:
        cursor = conn.execute(
            "INSERT OR IGNORE INTO user_roles (user_id, role_id) VALUES (?, ?)",
            (user_id, role_id),
        )
        if cursor.rowcount == 0:
            return False
        record_audit(conn, "user_roles", user_id, AuditAction.CREATE, None, {"role_id": role_id}, actor_id)
        return True

    def remove_role(self, user_id: int, role_id: int, actor_id: int | None = None) -> None:
        with self._manager.transaction() as conn:
            cursor = conn.execute(
                "DELETE FROM user_roles WHERE user_id = ? AND role_id = ?", (user_id, role_id)
            )
            if cursor.rowcount == 0:
                raise NotFoundError("Role assignment not found")
            record_audit(conn, "user_roles", user_id, AuditAction.DELETE, {"role_id": role_id}, None, actor_id)

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    def register(self, values: dict[str, Any], role_name: str) -> User:
        """Create an active account holding *role_name*, in one transaction."""
        values = self._hash({**values, "is_active": True})
        with self._manager.transaction() as conn:
            self._check_unique(conn, values)
            user_id = self._insert(conn, values, None)
            role = conn.execute("SELECT role_id FROM roles WHERE role_name = ?", (role_name,)).fetchone()
            if role is not None:
                self._grant(conn, user_id, role["role_id"], user_id)
            else:
                logger.warning("Role %s missing, %s registered without roles", role_name, values["username"])
            user = self._load(conn, user_id)
            user.roles = self._roles(conn, user_id)
        logger.info("User %s registered", user.username)
        return user

    def authenticate(self, email: str, password: str) -> User | None:
        """Active user matching *email* and *password*, with roles; else None."""
        with self._manager.transaction() as conn:
            row = conn.execute(
                "SELECT * FROM users WHERE email = ? AND is_active = 1", (email,)
            ).fetchone()
            if row is None or not verify_password(password, row["password_hash"]):
                return None
            user = User.from_row(row)
            user.roles = self._roles(conn, user.user_id)
        return user
