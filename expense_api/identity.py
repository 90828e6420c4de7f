# expense_api/identity.py
"""
Account store and credential issuer.

Passwords are hashed with werkzeug; bearer tokens are flask_jwt_extended
access tokens carrying the account's `token_version`. Revoking tokens bumps
that version, which invalidates every token issued before.
"""

import logging
import sqlite3
import uuid

from flask_jwt_extended import create_access_token
from werkzeug.security import check_password_hash, generate_password_hash

from .errors import AuthenticationError, ConflictError
from .models import User, to_storage, utcnow

logger = logging.getLogger("expense-api")


class IdentityProvider:
    def __init__(self, database):
        self.db = database

    def get_user(self, uid):
        row = self.db.query("SELECT * FROM users WHERE uid = ?", (uid,), one=True)
        return User.from_row(row) if row else None

    def get_user_by_email(self, email):
        row = self.db.query("SELECT * FROM users WHERE email = ?", (email.strip().lower(),), one=True)
        return User.from_row(row) if row else None

    def register(self, email, password, display_name=None):
        email = email.strip().lower()
        now = to_storage(utcnow())
        uid = str(uuid.uuid4())
        try:
            self.db.execute(
                "INSERT INTO users (uid, email, display_name, password_hash, created_at, updated_at) "
                "VALUES (?,?,?,?,?,?)",
                (uid, email, display_name or email.split("@")[0], generate_password_hash(password), now, now),
            )
        except sqlite3.IntegrityError as e:
            if "users.email" in str(e):
                raise ConflictError("Email already registered") from e
            raise
        logger.info(f"Registered user {uid} ({email})")
        return self.get_user(uid)

    def authenticate(self, email, password):
        user = self.get_user_by_email(email)
        if user is None or not check_password_hash(user.password_hash, password):
            raise AuthenticationError("Invalid email or password")
        if not user.is_active:
            raise AuthenticationError("Account is disabled", reason="Contact support to re-enable the account")

        now = to_storage(utcnow())
        self.db.execute("UPDATE users SET last_login = ?, updated_at = ? WHERE uid = ?", (now, now, user.uid))
        return self.get_user(user.uid)

    def issue_token(self, user):
        return create_access_token(
            identity=user.uid,
            additional_claims={
                "email": user.email,
                "email_verified": user.email_verified,
                "ver": user.token_version,
            },
        )

    def revoke_tokens(self, uid):
        """Invalidate every token issued so far; returns the revocation time."""
        revoked_at = utcnow()
        stamp = to_storage(revoked_at)
        self.db.execute(
            "UPDATE users SET token_version = token_version + 1, tokens_valid_after = ?, updated_at = ? "
            "WHERE uid = ?",
            (stamp, stamp, uid),
        )
        logger.info(f"Revoked tokens for user {uid}")
        return revoked_at

    def is_revoked(self, claims):
        user = self.get_user(claims.get("sub"))
        if user is None:
            return False
        return claims.get("ver") != user.token_version
