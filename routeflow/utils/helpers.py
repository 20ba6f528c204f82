"""Shared request-parsing helpers.

parse_int:        form fields arrive as decimal strings; bad input falls back
                  to a default instead of failing the request
request_field:    one lookup across form body, query string and JSON body
check_length:     rejects text longer than its column before it reaches the DB
"""
import re

from flask import request

from routeflow.core.exceptions import ValidationError

_INT_RE = re.compile(r"^[+-]?\d+$")

# Signed 32-bit INTEGER column range
INT_MIN = -(2 ** 31)
INT_MAX = 2 ** 31 - 1


def parse_int(value, default=0):
    """Parse a decimal integer, returning ``default`` for anything else.

    Accepts ints and strings such as ``"5"``, ``" -100 "``.  Rejects
    ``"e3"``, ``"1.5"``, ``"invalid value"``, ``None``, booleans and values
    outside the INTEGER column range.
    """
    if isinstance(value, bool) or value is None:
        return default
    if isinstance(value, int):
        parsed = value
    else:
        text = str(value).strip()
        if not _INT_RE.match(text):
            return default
        parsed = int(text)
    if not INT_MIN <= parsed <= INT_MAX:
        return default
    return parsed


def request_field(name, default=None):
    """Return a request parameter from form data, query string, or JSON body.

    Form-encoded bodies are the primary transport; DELETE requests commonly
    carry their parameters in the query string.
    """
    if name in request.form:
        return request.form.get(name)
    if name in request.args:
        return request.args.get(name)
    payload = request.get_json(silent=True)
    if isinstance(payload, dict) and name in payload:
        return payload.get(name)
    return default


def column_length(model, column_name):
    """Declared length of a String column, e.g. ``column_length(Action, "action_text")``."""
    return model.__table__.c[column_name].type.length


def check_length(field, value, limit):
    """Raise ValidationError when ``value`` is longer than ``limit`` characters."""
    if value and limit and len(value) > limit:
        raise ValidationError(
            f"{field} must be at most {limit} characters",
            details={field: "too_long", "max_length": limit},
        )
    return value
