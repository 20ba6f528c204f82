"""
Dependency Registry Blueprint - requirements, group privileges, step links.

Routes:
  GET    /api/workflow/dependencies                          – list requirements
  POST   /api/workflow/dependencies                          – create   → "<dependencyID>"
  POST   /api/workflow/dependency/<did>                      – rename   → "1"
  GET    /api/system/groups                                  – group directory
  POST   /api/system/groups                                  – register / rename → "1"
  GET    /api/workflow/dependency/<did>/privileges           – privileged groups
  POST   /api/workflow/dependency/<did>/privileges           – grant    → "1"
  DELETE /api/workflow/dependency/<did>/privileges           – revoke   → "1"
  GET    /api/workflow/step/<sid>/dependencies               – resolved step requirements
  POST   /api/workflow/step/<sid>/dependencies               – link     → "1"
  DELETE /api/workflow/step/<sid>/dependencies               – unlink   → "1"
  POST   /api/workflow/step/<sid>/indicatorID_for_assigned_empUID    → "1"
  POST   /api/workflow/step/<sid>/indicatorID_for_assigned_groupID   → "1"

Requirement IDs may be negative (reserved requirements), hence the signed
int converter.  Reserved-ID misuse surfaces as HTTP 400 from the shared
ReservedDependencyError handler.
"""

import logging

from flask import Blueprint, jsonify

from routeflow.auth import require_role
from routeflow.blueprints import confirmed, created_id, register_error_handlers
from routeflow.services import dependency_service
from routeflow.utils.helpers import parse_int, request_field

logger = logging.getLogger(__name__)

dependency_bp = Blueprint("dependency", __name__, url_prefix="/api")
register_error_handlers(dependency_bp)


# ── Requirement definitions ───────────────────────────────────────────────────


@dependency_bp.route("/workflow/dependencies", methods=["GET"])
def list_dependencies():
    return jsonify(dependency_service.list_dependencies())


@dependency_bp.route("/workflow/dependencies", methods=["POST"])
@require_role("admin")
def new_dependency():
    """Body: description"""
    dependency_id = dependency_service.create_dependency(request_field("description", ""))
    return created_id(dependency_id)


@dependency_bp.route("/workflow/dependency/<int(signed=True):dependency_id>", methods=["POST"])
@require_role("admin")
def update_dependency(dependency_id):
    """Body: description"""
    dependency_service.update_dependency(dependency_id, request_field("description", ""))
    return confirmed()


# ── Group directory ───────────────────────────────────────────────────────────


@dependency_bp.route("/system/groups", methods=["GET"])
def list_groups():
    return jsonify(dependency_service.list_groups())


@dependency_bp.route("/system/groups", methods=["POST"])
@require_role("admin")
def upsert_group():
    """Body: groupID, name"""
    dependency_service.upsert_group(parse_int(request_field("groupID")), request_field("name", ""))
    return confirmed()


# ── Group privileges ──────────────────────────────────────────────────────────


@dependency_bp.route(
    "/workflow/dependency/<int(signed=True):dependency_id>/privileges",
    methods=["GET"],
)
def get_privileges(dependency_id):
    return jsonify(dependency_service.get_dependency_privileges(dependency_id))


@dependency_bp.route(
    "/workflow/dependency/<int(signed=True):dependency_id>/privileges",
    methods=["POST"],
)
@require_role("admin")
def grant_privileges(dependency_id):
    """Body: groupID"""
    dependency_service.set_group_privilege(dependency_id, parse_int(request_field("groupID")))
    return confirmed()


@dependency_bp.route(
    "/workflow/dependency/<int(signed=True):dependency_id>/privileges",
    methods=["DELETE"],
)
@require_role("admin")
def revoke_privileges(dependency_id):
    """Query: groupID"""
    dependency_service.remove_group_privilege(dependency_id, parse_int(request_field("groupID")))
    return confirmed()


# ── Step links ────────────────────────────────────────────────────────────────


@dependency_bp.route("/workflow/step/<int:step_id>/dependencies", methods=["GET"])
def get_step_dependencies(step_id):
    return jsonify(dependency_service.get_step_dependencies(step_id))


@dependency_bp.route("/workflow/step/<int:step_id>/dependencies", methods=["POST"])
@require_role("admin")
def link_dependency(step_id):
    """Body: dependencyID, workflowID"""
    dependency_service.link_step_dependency(
        step_id,
        parse_int(request_field("dependencyID")),
        parse_int(request_field("workflowID")),
    )
    return confirmed()


@dependency_bp.route("/workflow/step/<int:step_id>/dependencies", methods=["DELETE"])
@require_role("admin")
def unlink_dependency(step_id):
    """Query: dependencyID, workflowID"""
    dependency_service.unlink_step_dependency(
        step_id,
        parse_int(request_field("dependencyID")),
        parse_int(request_field("workflowID")),
    )
    return confirmed()


@dependency_bp.route(
    "/workflow/step/<int:step_id>/indicatorID_for_assigned_empUID",
    methods=["POST"],
)
@require_role("admin")
def set_person_designated_field(step_id):
    """Body: indicatorID"""
    dependency_service.set_step_indicator(step_id, "empUID", parse_int(request_field("indicatorID")))
    return confirmed()


@dependency_bp.route(
    "/workflow/step/<int:step_id>/indicatorID_for_assigned_groupID",
    methods=["POST"],
)
@require_role("admin")
def set_group_designated_field(step_id):
    """Body: indicatorID"""
    dependency_service.set_step_indicator(step_id, "groupID", parse_int(request_field("indicatorID")))
    return confirmed()
