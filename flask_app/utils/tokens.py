# flask_app/utils/tokens.py
"""
Bearer token helpers. Tokens are signed JWTs carrying the user id (``sub``)
and role code (``role``).
"""

from datetime import datetime, timedelta, timezone

import jwt
from flask import current_app


def create_access_token(user, expires_minutes=None):
    """Create a signed bearer token for a user."""
    minutes = expires_minutes or current_app.config["JWT_EXPIRES_MINUTES"]
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user.id),
        "role": user.role.value,
        "iat": now,
        "exp": now + timedelta(minutes=minutes),
    }
    return jwt.encode(
        payload,
        current_app.config["JWT_SECRET_KEY"],
        algorithm=current_app.config["JWT_ALGORITHM"],
    )


def decode_access_token(token):
    """
    Decode and verify a bearer token.

    Raises:
        jwt.InvalidTokenError: if the token is malformed, expired or badly signed.
    """
    return jwt.decode(
        token,
        current_app.config["JWT_SECRET_KEY"],
        algorithms=[current_app.config["JWT_ALGORITHM"]],
        options={"require": ["sub", "exp"]},
    )


def bearer_token_from_header(header_value):
    """Extract the token from an ``Authorization: Bearer ...`` header value."""
    if not header_value:
        return None
    scheme, _, token = header_value.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()
