# flask_app/utils/permissions.py

from functools import wraps

from flask import current_app, g, request
from flask_login import current_user

from config.monitoring import ServiceMonitoring
from flask_app.models import UserRole
from flask_app.utils.errors import Forbidden, Unauthenticated


def get_role_claim():
    """Parse the role claim of the current bearer token, or None if absent/unparseable"""
    claims = g.get("token_claims") or {}
    return UserRole.parse(claims.get("role"))


def _deny(reason, error):
    ServiceMonitoring.AUTHORIZATION_DENIALS.labels(reason=reason).inc()
    current_app.logger.warning(f"Authorization denied ({reason}) for {request.method} {request.path}")
    raise error


def role_required(*roles):
    """
    Decorator allowing the call only when the caller's role claim is in ``roles``.

    Unauthenticated callers get Unauthenticated; a missing, unparseable or
    disallowed role gets Forbidden. The handler never runs on denial.
    """
    allowed = frozenset(roles)

    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not current_user.is_authenticated:
                _deny("unauthenticated", Unauthenticated())

            role = get_role_claim()
            if role is None:
                _deny("missing_role", Forbidden("Role claim missing or invalid"))
            if role not in allowed:
                _deny("role_not_allowed", Forbidden())

            return f(*args, **kwargs)

        decorated_function.allowed_roles = allowed
        return decorated_function

    return decorator


# Named allow-lists
volunteer_only = role_required(UserRole.VOLUNTEER)
organization_only = role_required(UserRole.ORGANIZATION)
admin_only = role_required(UserRole.ADMINISTRATOR)
volunteer_or_admin = role_required(UserRole.VOLUNTEER, UserRole.ADMINISTRATOR)
organization_or_admin = role_required(UserRole.ORGANIZATION, UserRole.ADMINISTRATOR)
