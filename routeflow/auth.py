"""
Authentication, authorization and CSRF middleware.

Provides:
    - API key authentication via X-API-Key header or ?api_key= query param
    - Role-based access control (RBAC) decorator
    - Per-session CSRF token for state-changing requests

Security model:
    - All /api/* endpoints require a valid API key, except health checks and
      the CSRF token endpoint.  With TRUST_SAME_ORIGIN set, same-origin
      requests from the workflow editor are trusted as admin.
    - Every mutation in the workflow editor requires the 'admin' role.
    - State-changing requests must echo the session's CSRFToken as a form
      field, query parameter or X-CSRF-Token header.

Configuration (env vars / app config):
    API_KEYS          - comma-separated "<key>:<role>" list, role in admin|editor|viewer
    API_AUTH_ENABLED  - "false" disables API key auth (development / testing)
    CSRF_ENABLED      - False disables the CSRF token check
    TRUST_SAME_ORIGIN - True lets same-origin browser requests skip the API key
"""

import functools
import hmac
import logging
import os
import secrets
from typing import Optional

from flask import current_app, g, jsonify, request, session

from routeflow.utils.errors import E, api_error

logger = logging.getLogger(__name__)

# ── Roles ────────────────────────────────────────────────────────────────────

ROLES = {"admin", "editor", "viewer"}

# Role hierarchy: admin > editor > viewer
ROLE_HIERARCHY = {
    "admin": {"admin", "editor", "viewer"},
    "editor": {"editor", "viewer"},
    "viewer": {"viewer"},
}

CSRF_FIELD = "CSRFToken"
CSRF_HEADER = "X-CSRF-Token"

_UNPROTECTED_PREFIXES = ("/api/health", "/api/csrf-token")
_STATE_CHANGING = ("POST", "PUT", "PATCH", "DELETE")


def _parse_api_keys() -> dict[str, str]:
    """
    Parse API_KEYS env var into {key: role} mapping.

    Format: "key1:admin,key2:viewer,key3:editor"
    Keys without a role default to 'viewer'.
    """
    raw = os.getenv("API_KEYS", "") or current_app.config.get("API_KEYS", "")
    if not raw.strip():
        return {}

    keys = {}
    for entry in raw.split(","):
        entry = entry.strip()
        if not entry:
            continue
        if ":" in entry:
            key, role = entry.rsplit(":", 1)
            role = role.strip().lower()
            if role not in ROLES:
                logger.warning("Unknown role '%s' for API key, defaulting to 'viewer'", role)
                role = "viewer"
            keys[key.strip()] = role
        else:
            keys[entry] = "viewer"
    return keys


def _is_auth_enabled() -> bool:
    """Check whether authentication is enabled (env var or app config)."""
    env_val = os.getenv("API_AUTH_ENABLED", "")
    if env_val:
        return env_val.lower() not in ("false", "0", "no", "off")
    try:
        return str(current_app.config.get("API_AUTH_ENABLED", "true")).lower() not in ("false", "0", "no", "off")
    except RuntimeError:
        # Outside app context
        return True


def _is_csrf_enabled() -> bool:
    return bool(current_app.config.get("CSRF_ENABLED", True))


def _get_api_key_from_request() -> Optional[str]:
    """Extract API key from request header or query parameter."""
    key = request.headers.get("X-API-Key", "").strip()
    if key:
        return key
    return request.args.get("api_key", "").strip() or None


def _is_same_origin_request() -> bool:
    """
    Detect same-origin browser requests coming from the workflow editor.

    Sec-Fetch-Site cannot be forged by page JavaScript; the Referer check is
    the fallback for older browsers.
    """
    fetch_site = request.headers.get("Sec-Fetch-Site", "")
    if fetch_site in ("same-origin", "same-site"):
        return True

    referer = request.headers.get("Referer", "")
    if referer:
        host_url = request.host_url.rstrip("/")
        if referer.startswith(host_url):
            return True

    return False


# ── CSRF ─────────────────────────────────────────────────────────────────────

def get_csrf_token() -> str:
    """Return the session's CSRF token, issuing one on first use."""
    token = session.get(CSRF_FIELD)
    if not token:
        token = secrets.token_hex(16)
        session[CSRF_FIELD] = token
    return token


def _submitted_csrf_token() -> str:
    token = request.form.get(CSRF_FIELD) or request.args.get(CSRF_FIELD)
    if not token:
        token = request.headers.get(CSRF_HEADER, "")
    if not token:
        payload = request.get_json(silent=True)
        if isinstance(payload, dict):
            token = payload.get(CSRF_FIELD) or ""
    return token or ""


def _check_csrf_token():
    """Reject state-changing requests whose CSRFToken does not match the session."""
    if request.method not in _STATE_CHANGING or not _is_csrf_enabled():
        return None
    expected = session.get(CSRF_FIELD, "")
    submitted = _submitted_csrf_token()
    if not expected or not hmac.compare_digest(expected, submitted):
        logger.warning("CSRF token mismatch on %s %s", request.method, request.path)
        return api_error(E.CSRF, "Invalid or missing CSRFToken")
    return None


# ── Authorization decorator ──────────────────────────────────────────────────

def require_role(minimum_role: str):
    """
    Decorator: require a minimum role level.

    Usage:
        @workflow_bp.route("/workflow/new", methods=["POST"])
        @require_role("admin")
        def new_workflow(): ...

    Role hierarchy: admin > editor > viewer
    """
    def decorator(f):
        @functools.wraps(f)
        def decorated(*args, **kwargs):
            user_role = getattr(g, "current_user_role", None)
            if not user_role:
                return jsonify({"error": "Authentication required"}), 401

            allowed = ROLE_HIERARCHY.get(user_role, set())
            if minimum_role not in allowed:
                logger.warning(
                    "Access denied: role '%s' tried to access '%s'-level endpoint %s",
                    user_role, minimum_role, request.path,
                )
                return api_error(E.FORBIDDEN, "Insufficient permissions")

            return f(*args, **kwargs)
        return decorated
    return decorator


# ── App-level hook installer ─────────────────────────────────────────────────

def init_auth(app):
    """
    Install authentication + CSRF middleware on the Flask app.

    - Registers GET /api/csrf-token
    - Attaches a before_request hook for /api/ routes
    """

    @app.route("/api/csrf-token", methods=["GET"])
    def csrf_token():
        return jsonify({CSRF_FIELD: get_csrf_token()})

    @app.before_request
    def _before_request_auth():
        if not request.path.startswith("/api/"):
            return None
        if request.path.startswith(_UNPROTECTED_PREFIXES):
            return None
        if request.method == "OPTIONS":
            return None

        csrf_error = _check_csrf_token()
        if csrf_error:
            return csrf_error

        if not _is_auth_enabled():
            g.current_user_role = "admin"
            g.api_key = "dev-mode"
            return None

        # Opt-in: Sec-Fetch-Site and Referer are only trustworthy from a browser
        if current_app.config.get("TRUST_SAME_ORIGIN", False) and _is_same_origin_request():
            g.current_user_role = "admin"
            g.api_key = "editor-session"
            return None

        api_key = _get_api_key_from_request()
        if not api_key:
            return jsonify({"error": "Authentication required. Provide X-API-Key header."}), 401

        api_keys = _parse_api_keys()
        if not api_keys:
            logger.error("API_KEYS is not configured but API_AUTH_ENABLED=true")
            return jsonify({"error": "Server authentication not configured"}), 500

        role = api_keys.get(api_key)
        if role is None:
            logger.warning("Invalid API key attempt: %s...", api_key[:8])
            return jsonify({"error": "Invalid API key"}), 401

        g.current_user_role = role
        g.api_key = api_key
        return None

    logger.info(
        "Auth middleware installed (auth=%s, csrf=%s)",
        app.config.get("API_AUTH_ENABLED"), app.config.get("CSRF_ENABLED", True),
    )
