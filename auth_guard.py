# auth_guard.py
from __future__ import annotations

import jwt
from functools import wraps

from flask import request, jsonify, g, current_app

from db import db
from models.user import User
from services.authorization import Caller
from utils.tokens import bearer_token, decode_token

__all__ = ["require_role", "current_caller"]


def _unauthorized(message: str):
    return jsonify(success=False, message=message), 401


def current_caller() -> Caller:
    return g.caller  # type: ignore[attr-defined]


def require_role(*roles):
    """
    Usage:
      @require_role()                  -> any authenticated, active user
      @require_role("admin")           -> only admins
      @require_role("driver")          -> drivers (or admin)
    """
    # Support passing a single list/tuple as well
    if len(roles) == 1 and isinstance(roles[0], (list, tuple, set)):
        roles = tuple(roles[0])
    allowed = {str(r).lower() for r in roles if r}

    def decorator(f):
        @wraps(f)
        def wrapped(*args, **kwargs):
            token = bearer_token(request.headers.get("Authorization"))
            if not token:
                return _unauthorized("Access token required")

            try:
                payload = decode_token(token)
            except jwt.ExpiredSignatureError:
                return _unauthorized("Token has expired")
            except jwt.InvalidTokenError:
                return _unauthorized("Invalid token")

            # always re-read the user; the token may outlive a deactivation
            user = db.session.get(User, payload.get("user_id"))
            if not user or not user.is_active:
                return _unauthorized("User not found or inactive")

            role = (user.role or "").lower()
            g.user = user  # type: ignore[attr-defined]
            g.role = role  # type: ignore[attr-defined]
            g.caller = Caller.from_user(user)  # type: ignore[attr-defined]

            current_app.logger.info(
                "[guard] %s %s uid=%s email=%s role=%s ip=%s",
                request.method,
                request.path,
                user.id,
                user.email,
                role,
                request.remote_addr,
            )

            # Role check (admin bypass)
            if allowed and role not in allowed and role != "admin":
                return jsonify(success=False, message="Insufficient permissions"), 403

            return f(*args, **kwargs)

        return wrapped

    return decorator
