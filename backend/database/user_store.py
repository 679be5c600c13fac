"""
User lookups for request authentication.
"""

from contextlib import closing
from dataclasses import dataclass
from typing import Any, Optional

from backend.database import db_connection


@dataclass(frozen=True)
class User:
    user_id: Any
    email: Optional[str] = None
    role: Optional[str] = None


class UserStore:
    """
    Resolves user records from the `users` table.

    The gateway builds one instance and hands it to the routes, so tests can
    swap in a fake with the same `get_user` method.
    """

    def __init__(self, connect=None):
        # Resolved lazily so tests can patch db_connection.get_db
        self._connect = connect

    def get_user(self, user_id: Any) -> Optional[User]:
        """
        Look up a user by id.

        Returns:
            User: The matching record, or None if no such user exists.
        """
        sql = "SELECT user_id, email, role FROM users WHERE user_id = %s;"
        connect = self._connect or db_connection.get_db

        # `with conn` only ends the transaction; closing() releases the connection
        with closing(connect()) as conn:
            with conn:
                with conn.cursor() as cur:
                    cur.execute(sql, (user_id,))
                    row = cur.fetchone()

        if not row:
            return None

        return User(user_id=row["user_id"], email=row["email"], role=row["role"])
