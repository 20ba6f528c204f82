"""
Health check blueprint.

Endpoints:
    GET /api/health/ready  - simple 200 for load balancers
    GET /api/health/live   - database round-trip and reference-data check
"""

import logging
import time

from flask import Blueprint, current_app, jsonify

from routeflow.models import db
from routeflow.models.dependency import Dependency, ReservedDependency

logger = logging.getLogger(__name__)

health_bp = Blueprint("health", __name__, url_prefix="/api/health")


@health_bp.route("/ready", methods=["GET"])
def ready():
    """Simple readiness check - always 200 if app is running."""
    return jsonify({"status": "ok"}), 200


@health_bp.route("/live", methods=["GET"])
def live():
    """Detailed liveness check with dependency status."""
    checks = {}
    overall = True

    # ── Database ─────────────────────────────────────────────────────
    try:
        t0 = time.perf_counter()
        db.session.execute(db.text("SELECT 1"))
        db_ms = (time.perf_counter() - t0) * 1000
        checks["database"] = {"status": "ok", "latency_ms": round(db_ms, 1)}
    except Exception as exc:
        checks["database"] = {"status": "error", "detail": str(exc)}
        overall = False
        logger.error("Health check - database failed: %s", exc)

    # ── Reserved requirements seeded ─────────────────────────────────
    if overall:
        expected = {int(r) for r in ReservedDependency}
        present = {
            d.id for d in db.session.execute(
                db.select(Dependency).where(Dependency.id.in_(expected))
            ).scalars()
        }
        missing = sorted(expected - present)
        checks["reference_data"] = {
            "status": "ok" if not missing else "missing",
            "missing_dependencies": missing,
        }
        if missing:
            overall = False

    checks["app"] = {
        "name": "Workflow Routing Service",
        "debug": current_app.debug,
        "testing": current_app.testing,
    }

    status_code = 200 if overall else 503
    return jsonify({
        "status": "healthy" if overall else "degraded",
        "checks": checks,
    }), status_code
