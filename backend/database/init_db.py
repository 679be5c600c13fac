"""
Database setup and quick integrity check.

Creates the `users` table the image service authenticates against, then
runs a small insert/lookup/delete cycle through the UserStore to make sure
the schema matches what the service queries.
"""

import os
import sys
from contextlib import closing

# Ensure the backend module can be found
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..', '..')))

try:
    from backend.database.db_connection import get_db
    from backend.database.user_store import UserStore
except ImportError:
    print("Error: Could not import get_db(). Make sure backend/database/db_connection.py exists.")
    sys.exit(1)


USERS_SCHEMA = """
    CREATE TABLE IF NOT EXISTS users (
        user_id SERIAL PRIMARY KEY,
        email VARCHAR(255) UNIQUE NOT NULL,
        role VARCHAR(32) NOT NULL DEFAULT 'user',
        created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
    );
"""


def init_db() -> None:
    """
    Create the tables used by the service if they don't exist yet.
    """
    with closing(get_db()) as conn:
        with conn:
            with conn.cursor() as cur:
                cur.execute(USERS_SCHEMA)


def check_db() -> bool:
    """
    Insert a throwaway user, resolve it through the UserStore and remove it again.

    Returns:
        bool: True if the round trip worked.
    """
    conn = get_db()
    cur = conn.cursor()
    user_id = None

    try:
        cur.execute("SELECT NOW();")
        print(f"Connected! Database server time: {cur.fetchone()[0]}")

        cur.execute("""
            INSERT INTO users (email, role)
            VALUES ('setup-check@example.com', 'user')
            RETURNING user_id;
        """)
        user_id = cur.fetchone()[0]
        conn.commit()

        user = UserStore().get_user(user_id)
        if user is None or user.email != "setup-check@example.com":
            raise Exception("UserStore could not resolve the inserted user.")

        print(f"Resolved user_id={user.user_id} role={user.role}")
        print("\nDatabase check PASSED")
        return True

    except Exception as e:
        print("\nDatabase check FAILED:")
        print(f" Error: {e}")
        conn.rollback()
        return False

    finally:
        # Mandatory cleanup
        if user_id:
            try:
                cur.execute("DELETE FROM users WHERE user_id = %s;", (user_id,))
                conn.commit()
            except Exception as cleanup_error:
                print(f"Cleanup FAILED. Database may contain leftover test data: {cleanup_error}")
                conn.rollback()
        cur.close()
        conn.close()


if __name__ == "__main__":
    print("--- Initializing database ---")
    init_db()
    sys.exit(0 if check_db() else 1)
