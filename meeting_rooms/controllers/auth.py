"""Admin authentication: login, registration and OTP password reset."""

from __future__ import annotations

import secrets
import sqlite3
from datetime import datetime, timedelta, timezone
from functools import wraps
from typing import Callable

from flask import Blueprint, current_app, g
from flask_login import current_user, login_required
from flask_wtf import FlaskForm
from wtforms import PasswordField, StringField
from wtforms.validators import Email, InputRequired, Length

from ..data_access import users_dao
from ..errors import AuthError, ConflictError, ForbiddenError, ValidationError
from ..extensions import login_manager
from ..models.entities import ROLE_ADMIN
from ..services import notifications
from .responses import respond, validated

bp = Blueprint("auth", __name__, url_prefix="/api/admin")

ALLOWED_ROLES = (ROLE_ADMIN,)
OTP_RESPONSE = "If the email is registered, a reset code has been sent."
INVALID_OTP = "The reset code is invalid or has expired."


class ApiForm(FlaskForm):
    """JSON-bodied form; bearer tokens stand in for CSRF protection."""

    class Meta:
        csrf = False


class RegistrationForm(ApiForm):
    email = StringField("Email", validators=[InputRequired(), Email(), Length(max=255)])
    username = StringField("Username", validators=[InputRequired(), Length(min=3, max=80)])
    password = PasswordField("Password", validators=[InputRequired(), Length(min=6, max=128)])


class LoginForm(ApiForm):
    username = StringField("Username", validators=[InputRequired()])
    password = PasswordField("Password", validators=[InputRequired()])


class ForgotPasswordForm(ApiForm):
    email = StringField("Email", validators=[InputRequired(), Email()])


class ResetPasswordForm(ApiForm):
    email = StringField("Email", validators=[InputRequired(), Email()])
    otp = StringField("OTP", validators=[InputRequired(), Length(min=6, max=6)])
    new_password = PasswordField("New password", validators=[InputRequired(), Length(min=6, max=128)])


@login_manager.request_loader
def load_user_from_request(request):
    """Resolve the bearer credential into a user; decoded once per request."""

    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    try:
        claims = current_app.extensions["jwt"].decode_token(token.strip())
    except AuthError:
        return None
    user = users_dao.get_user_by_id(claims.user_id)
    if user is None or user.role != claims.role:
        return None
    g.token_claims = claims
    return user


@login_manager.unauthorized_handler
def unauthorized():
    raise AuthError()


def role_required(*roles: str) -> Callable:
    """Decorator enforcing role-based access control."""

    allowed_roles = tuple(role for role in roles if role in ALLOWED_ROLES)

    def decorator(view: Callable) -> Callable:
        @wraps(view)
        @login_required
        def wrapped(*args, **kwargs):
            claims = g.get("token_claims")
            if claims is None:
                raise AuthError()
            if allowed_roles and claims.role not in allowed_roles:
                raise ForbiddenError()
            return view(*args, **kwargs)

        return wrapped

    return decorator


admin_required = role_required(ROLE_ADMIN)


@bp.route("/login", methods=["POST"])
def login():
    """Exchange admin credentials for a bearer token."""

    form = validated(LoginForm())
    user = users_dao.get_user_by_username(form.username.data)
    if not user or not user.is_admin or not users_dao.verify_password(user.password_hash, form.password.data):
        current_app.logger.warning("Failed admin login for username %r", form.username.data)
        raise AuthError("Invalid credentials.")

    token = current_app.extensions["jwt"].create_token(user)
    current_app.logger.info("Admin %s signed in", user.username)
    return respond({"token": token}, "Login successful.")


@bp.route("/register", methods=["POST"])
@admin_required
def register():
    """Create another administrator account."""

    form = validated(RegistrationForm())
    try:
        user = users_dao.create_user(
            username=form.username.data,
            email=form.email.data,
            password_hash=users_dao.hash_password(form.password.data),
        )
    except sqlite3.IntegrityError:
        raise ConflictError("Username or email already exists.")
    current_app.logger.info("Admin %s registered by %s", user.username, current_user.username)
    return respond(user.to_dict(), "Admin registered successfully.", 201)


@bp.route("/forgot-password", methods=["POST"])
def forgot_password():
    """Email a one-time reset code; the reply never reveals whether the account exists."""

    form = validated(ForgotPasswordForm())
    user = users_dao.get_user_by_email(form.email.data)
    if user is None or not user.is_admin:
        return respond(None, OTP_RESPONSE)

    ttl_minutes = current_app.config["OTP_TTL_MINUTES"]
    otp = f"{secrets.randbelow(1_000_000):06d}"
    expiry = datetime.now(timezone.utc) + timedelta(minutes=ttl_minutes)
    users_dao.set_reset_otp(user.user_id, otp, expiry)
    try:
        message = notifications.password_otp_message(user.email, otp, ttl_minutes)
        notifications.get_dispatcher().dispatch(message)
    except Exception:  # pylint: disable=broad-except
        current_app.logger.exception("Could not schedule password reset email")
    return respond(None, OTP_RESPONSE)


@bp.route("/reset-password", methods=["POST"])
def reset_password():
    """Set a new password using the emailed reset code."""

    form = validated(ResetPasswordForm())
    user = users_dao.get_user_by_email(form.email.data)
    now = datetime.now(timezone.utc).replace(tzinfo=None)
    if (
        user is None
        or not user.reset_otp
        or user.reset_otp_expiry is None
        or user.reset_otp_expiry < now
        or not secrets.compare_digest(user.reset_otp, form.otp.data)
    ):
        raise ValidationError(INVALID_OTP)

    users_dao.update_password(user.user_id, users_dao.hash_password(form.new_password.data))
    current_app.logger.info("Password reset for admin %s", user.username)
    return respond(None, "Password has been reset. Please sign in with the new password.")
