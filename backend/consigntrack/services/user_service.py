# Overview: Login whitelist. A user's uid doubles as their tenant id.

from __future__ import annotations

from flask import current_app

from ..extensions import db
from ..models import User
from ..validation import ValidationError
from .concurrency import lock_for_update, run_with_retry


ROLE_ADMIN = "admin"
ROLE_STAFF = "staff"
VALID_ROLES = [ROLE_ADMIN, ROLE_STAFF]


def whitelist_user(uid: str, email: str, role: str | None = None) -> User:
    """Upsert a user (merge semantics): existing users get email/role refreshed and are re-activated."""
    role = role or ROLE_STAFF
    if not uid:
        raise ValidationError("uid is required")
    if not email or "@" not in email:
        raise ValidationError("A valid email is required")
    if role not in VALID_ROLES:
        raise ValidationError(f"Invalid role: {role}. Must be one of {VALID_ROLES}")

    def _op():
        user = lock_for_update(db.session.query(User).filter_by(id=uid)).first()
        if user:
            user.email = email
            user.role = role
            user.active = True
        else:
            user = User(id=uid, email=email, role=role, active=True)
            db.session.add(user)
        db.session.flush()
        return user

    user = run_with_retry(_op)
    current_app.logger.info("User whitelisted: uid=%s role=%s", uid, role)
    return user


def fetch_user(uid: str) -> User | None:
    return db.session.query(User).filter_by(id=uid).first()


def deactivate_user(uid: str) -> User:
    def _op():
        user = lock_for_update(db.session.query(User).filter_by(id=uid)).first()
        if not user:
            raise ValidationError(f"User {uid} not found")
        user.active = False
        return user

    return run_with_retry(_op)


def list_users() -> list[User]:
    return db.session.query(User).order_by(User.email.asc()).all()
