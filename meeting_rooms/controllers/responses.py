"""JSON envelope shared by every endpoint."""

from __future__ import annotations

from typing import Any

from flask import jsonify, request
from flask_wtf import FlaskForm

from ..errors import ValidationError


def respond(data: Any = None, message: str = "", status: int = 200, success: bool = True):
    """Return ``{"success", "message", "data"}`` with the given status."""

    return jsonify({"success": success, "message": message, "data": data}), status


def error_response(message: str, status: int, details: Any = None):
    payload = {"success": False, "message": message, "data": None}
    if details:
        payload["errors"] = details
    return jsonify(payload), status


def validated(form: FlaskForm) -> FlaskForm:
    """Validate a submitted form or raise ValidationError with its field errors."""

    if not form.validate_on_submit():
        raise ValidationError("Input validation failed.", details=form.errors or None)
    return form


def int_arg(name: str, default: int) -> int:
    """Read an integer query argument, falling back to ``default`` when malformed."""

    value = request.args.get(name, type=int)
    return default if value is None else value
