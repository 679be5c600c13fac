"""
Shared authentication helpers.
Provides token creation and verification of the bearer token on incoming requests.
"""

import os
import logging
import jwt
from datetime import datetime, timedelta, timezone
from typing import Optional, Any
from flask import Request
from dotenv import load_dotenv

from backend.database.user_store import User

# Load .env only once here
load_dotenv()

# Load secrets & configs
JWT_SECRET = os.getenv("JWT_SECRET")
if not JWT_SECRET:
    raise RuntimeError("JWT_SECRET is missing. Set it in .env")

TOKEN_EXPIRATION_MINUTES = int(os.getenv("TOKEN_EXPIRATION_MINUTES", 1440))  # Default 24 hours


# --- JWT CREATION ---
def create_token(user_id: Any, role: str = "user") -> str:
    """
    Generates a new JWT for a given user.

    Args:
        user_id: The unique ID of the user. Stored as a string subject.
        role (str): The role of the user.

    Returns:
        str: Encoded JWT string.
    """
    now = datetime.now(timezone.utc)

    payload = {
        "sub": str(user_id),
        "role": role,
        "exp": now + timedelta(minutes=TOKEN_EXPIRATION_MINUTES),
        "iat": now
    }

    return jwt.encode(payload, JWT_SECRET, algorithm="HS256")


# --- JWT VALIDATION ---
def decode_token(token: str) -> Optional[str]:
    """
    Validate a JWT and return its subject.

    Args:
        token (str): JWT string.

    Returns:
        str: user_id if valid, None otherwise.
    """
    try:
        payload = jwt.decode(token, JWT_SECRET, algorithms=["HS256"])
    except jwt.ExpiredSignatureError:
        logging.info("[Auth] Rejected expired token")
        return None
    except jwt.InvalidTokenError:
        logging.info("[Auth] Rejected invalid token")
        return None
    return payload.get("sub")


def verify_token(request: Request, user_store) -> Optional[User]:
    """
    Resolve the authenticated user for a request.

    Reads the `Authorization: Bearer <jwt>` header, validates the token and
    looks the subject up in the user store.

    Args:
        request (Request): The incoming Flask request.
        user_store: Anything exposing `get_user(user_id) -> User | None`.

    Returns:
        User: The resolved user, or None when the request is not authenticated.
    """
    auth = request.headers.get("Authorization", "")

    if not auth.startswith("Bearer "):
        return None

    token = auth.split(" ", 1)[1].strip()
    user_id = decode_token(token)
    if user_id is None:
        return None

    try:
        return user_store.get_user(user_id)
    except Exception as e:
        logging.error(f"[Auth] User lookup failed for {user_id}: {e}")
        return None
