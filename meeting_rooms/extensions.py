"""Flask extension instances shared by the app factory and blueprints."""

from __future__ import annotations

from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_login import LoginManager

login_manager = LoginManager()

# Storage, enablement and headers come from RATELIMIT_* app config.
limiter = Limiter(key_func=get_remote_address, default_limits=[])
