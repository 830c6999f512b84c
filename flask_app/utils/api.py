# flask_app/utils/api.py
"""
Helpers for JSON request parsing and the response envelope.
"""

from datetime import datetime, timezone

from flask import jsonify, request

from flask_app.utils.errors import ValidationFailed


def api_response(data=None, message="", status=200):
    """Wrap a payload in the standard ``{success, message, data}`` envelope."""
    return jsonify({"success": True, "message": message, "data": data}), status


def get_json_body():
    """Return the request body as a dict or raise ValidationFailed."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationFailed("Request body must be a JSON object")
    return data


def require_int(data, field, *, minimum=1, maximum=None):
    """Read a required integer field from a parsed JSON body."""
    value = data.get(field)
    if isinstance(value, bool):
        value = None
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationFailed(f"{field} must be an integer", errors=[{"field": field, "error": "invalid"}])
    if number < minimum:
        raise ValidationFailed(f"{field} must be at least {minimum}", errors=[{"field": field, "error": "range"}])
    if maximum is not None and number > maximum:
        raise ValidationFailed(f"{field} must be at most {maximum}", errors=[{"field": field, "error": "range"}])
    return number


def optional_str(data, field, *, max_length=None):
    """Read an optional string field, stripping whitespace; empty becomes None."""
    value = data.get(field)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationFailed(f"{field} must be a string", errors=[{"field": field, "error": "invalid"}])
    value = value.strip()
    if max_length is not None and len(value) > max_length:
        raise ValidationFailed(
            f"{field} must be {max_length} characters or less",
            errors=[{"field": field, "error": "too_long"}],
        )
    return value or None


def require_str(data, field, *, max_length=None):
    """Read a required, non-blank string field."""
    value = optional_str(data, field, max_length=max_length)
    if value is None:
        raise ValidationFailed(f"{field} is required", errors=[{"field": field, "error": "required"}])
    return value


def optional_int(data, field, *, minimum=1, maximum=None):
    """Read an optional integer field; absent or null becomes None."""
    if data.get(field) is None:
        return None
    return require_int(data, field, minimum=minimum, maximum=maximum)


def optional_datetime(data, field):
    """Read an optional ISO 8601 timestamp; naive values are taken as UTC."""
    value = data.get(field)
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise ValidationFailed(f"{field} must be an ISO 8601 date", errors=[{"field": field, "error": "invalid"}])
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        raise ValidationFailed(f"{field} must be an ISO 8601 date", errors=[{"field": field, "error": "invalid"}])
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def query_int(name, default, *, minimum=1, maximum=None):
    """Read a bounded integer from the query string."""
    raw = request.args.get(name)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValidationFailed(f"{name} must be an integer", errors=[{"field": name, "error": "invalid"}])
    if value < minimum:
        value = minimum
    if maximum is not None and value > maximum:
        value = maximum
    return value
