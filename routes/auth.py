# routes/auth.py
from __future__ import annotations

import secrets
import time

from flask import Blueprint, jsonify, g, current_app
from sqlalchemy.exc import IntegrityError, OperationalError

from db import db
from models.user import User
from auth_guard import require_role
from services.errors import Conflict, Forbidden, NotFound, ValidationError
from services.public_view import user_payload
from utils.tokens import issue_token
from utils.validation import as_int, fits_db_id, is_int, json_body, validate_login, validate_registration

__all__ = ["auth_bp"]
auth_bp = Blueprint("auth", __name__, url_prefix="/auth")


def _admin_key_matches(given) -> bool:
    expected = current_app.config.get("ADMIN_KEY")
    if not (expected and isinstance(given, str) and given):
        return False
    return secrets.compare_digest(given, expected)


@auth_bp.after_request
def add_no_store(resp):
    resp.headers["Cache-Control"] = "no-store"
    return resp


@auth_bp.route("/ping", methods=["GET"])
def ping():
    return jsonify(ok=True, ts=time.time()), 200


# -------------------------------------------------------------------
# Register (driver by default; admin when adminKey matches ADMIN_KEY)
# -------------------------------------------------------------------
@auth_bp.route("/register", methods=["POST"])
def register():
    data = json_body()
    validate_registration(data)

    email = data["email"].strip().lower()
    if User.query.filter_by(email=email).first():
        raise Conflict("Email is already in use")

    role = "admin" if _admin_key_matches(data.get("adminKey")) else "driver"
    user = User(name=data["name"].strip(), email=email, role=role, is_active=True)
    user.set_password(data["password"])

    try:
        db.session.add(user)
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise Conflict("Email is already in use")

    current_app.logger.info("[auth] registered uid=%s role=%s", user.id, role)
    return jsonify(
        success=True,
        message="User created",
        data={"user": user_payload(user), "token": issue_token(user)},
    ), 201


# -------------------------------------------------------------------
# Login
# -------------------------------------------------------------------
@auth_bp.route("/login", methods=["POST"])
def login():
    data = json_body()
    validate_login(data)
    email = data["email"].strip().lower()

    def _get_user():
        return User.query.filter_by(email=email).first()

    # One-time retry if DB connection dropped
    try:
        user = _get_user()
    except OperationalError as e:
        current_app.logger.warning("[auth] DB connection dropped; retrying once… %s", e)
        db.session.remove()
        db.engine.dispose()
        user = _get_user()

    if not user:
        return jsonify(success=False, message="Invalid credentials"), 401
    if not user.is_active:
        return jsonify(success=False, message="Account is disabled"), 401
    if not user.check_password(data["password"]):
        return jsonify(success=False, message="Invalid credentials"), 401

    current_app.logger.info("[auth] login uid=%s role=%s", user.id, user.role)
    return jsonify(
        success=True,
        message="Logged in",
        data={"user": user_payload(user), "token": issue_token(user)},
    ), 200


# -------------------------------------------------------------------
# Promote an existing user to admin (requires ADMIN_KEY)
# -------------------------------------------------------------------
@auth_bp.route("/promote", methods=["POST"])
def promote():
    data = json_body()
    if not data.get("adminKey"):
        raise ValidationError("adminKey is required")
    if not _admin_key_matches(data.get("adminKey")):
        raise Forbidden("Invalid admin key")

    uid = data.get("userId")
    if not is_int(uid):
        raise ValidationError("userId must be an integer")

    user = db.session.get(User, as_int(uid)) if fits_db_id(uid) else None
    if not user:
        raise NotFound("User not found")

    user.role = "admin"
    db.session.commit()
    current_app.logger.info("[auth] promoted uid=%s to admin", user.id)
    return jsonify(success=True, message="User promoted to admin", data={"user": user_payload(user)}), 200


@auth_bp.route("/profile", methods=["GET"])
@require_role()
def profile():
    return jsonify(success=True, data={"user": user_payload(g.user)}), 200
