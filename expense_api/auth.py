# expense_api/auth.py
import logging
from collections import namedtuple

from flask import Blueprint, current_app, request
from flask_jwt_extended import JWTManager, get_jwt, get_jwt_identity, jwt_required

from .errors import NotFoundError
from .models import format_timestamp
from .responses import failure, success
from .validators import validate_login, validate_register

logger = logging.getLogger("expense-api")

auth_bp = Blueprint("auth", __name__)

Identity = namedtuple("Identity", ["uid", "email", "email_verified"])


def identity_provider():
    return current_app.extensions["identity_provider"]


def current_identity():
    """Verified (uid, email, email_verified) for the current request."""
    claims = get_jwt()
    return Identity(get_jwt_identity(), claims.get("email"), bool(claims.get("email_verified", False)))


def init_jwt(app):
    jwt = JWTManager(app)

    @jwt.token_in_blocklist_loader
    def token_revoked(jwt_header, jwt_payload):
        return identity_provider().is_revoked(jwt_payload)

    @jwt.user_lookup_loader
    def load_user(jwt_header, jwt_payload):
        user = identity_provider().get_user(jwt_payload["sub"])
        return user if user is not None and user.is_active else None

    @jwt.unauthorized_loader
    def missing_token(reason):
        return failure("Unauthorized: No token provided", 401, error="Missing or invalid Authorization header")

    @jwt.invalid_token_loader
    def invalid_token(reason):
        logger.info(f"Rejected malformed token: {reason}")
        return failure("Unauthorized: Invalid token", 401, error=reason)

    @jwt.expired_token_loader
    def expired_token(jwt_header, jwt_payload):
        return failure("Unauthorized: Token has expired", 401, error="Please login again to get a new token")

    @jwt.revoked_token_loader
    def revoked_token(jwt_header, jwt_payload):
        return failure("Unauthorized: Token has been revoked", 401, error="Please login again")

    @jwt.user_lookup_error_loader
    def unknown_user(jwt_header, jwt_payload):
        return failure("Unauthorized: Authentication failed", 401, error="User not found or inactive")

    return jwt


@auth_bp.route("/register", methods=["POST"])
def register():
    email, password, display_name = validate_register(request.get_json(silent=True))
    provider = identity_provider()
    user = provider.register(email, password, display_name)

    return success("User registered successfully", {
        "uid": user.uid,
        "email": user.email,
        "displayName": user.display_name,
        "token": provider.issue_token(user),
    }, 201)


@auth_bp.route("/login", methods=["POST"])
def login():
    email, password = validate_login(request.get_json(silent=True))
    provider = identity_provider()
    user = provider.authenticate(email, password)
    logger.info(f"User {user.uid} logged in")

    return success("Login successful", {
        "uid": user.uid,
        "email": user.email,
        "displayName": user.display_name,
        "lastLogin": format_timestamp(user.last_login),
        "token": provider.issue_token(user),
    })


@auth_bp.route("/logout", methods=["POST"])
@jwt_required()
def logout():
    uid = get_jwt_identity()
    revoked_at = identity_provider().revoke_tokens(uid)

    return success("Logout successful. All tokens have been revoked.", {
        "uid": uid,
        "tokensValidAfterTime": revoked_at.timestamp(),
    })


@auth_bp.route("/profile", methods=["GET"])
@jwt_required()
def profile():
    identity = current_identity()
    user = identity_provider().get_user(identity.uid)
    if user is None:
        raise NotFoundError("User not found")

    return success("Profile retrieved successfully", {
        "uid": user.uid,
        "email": user.email,
        "displayName": user.display_name,
        "emailVerified": user.email_verified,
        "lastLogin": format_timestamp(user.last_login),
        "createdAt": format_timestamp(user.created_at),
    })
