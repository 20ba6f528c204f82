"""
Workflow Store Blueprint.

Routes:
  GET    /api/workflow                          – list workflows
  POST   /api/workflow/new                      – create workflow       → "<workflowID>"
  GET    /api/workflow/<wid>                    – steps of a workflow
  DELETE /api/workflow/<wid>                    – delete workflow       → "1"
  POST   /api/workflow/<wid>/initialStep        – set entry step        → "1"
  POST   /api/workflow/<wid>/editorPosition     – set step coordinates  → "1"
  POST   /api/workflow/<wid>/step               – create step           → "<stepID>"
  GET    /api/workflow/step/<sid>               – step detail
  POST   /api/workflow/step/<sid>/title         – rename step           → "1"
  DELETE /api/workflow/step/<sid>               – delete step           → "1"
  GET    /api/workflow/<wid>/route              – routes of a workflow
  POST   /api/workflow/<wid>/action             – create route          → "1"
  DELETE /api/workflow/<wid>/action             – remove route          → "1"

Parameters arrive as form fields (query string for DELETE).
Layer contract: parse input here, business rules and commits in
workflow_service.
"""

import logging

from flask import Blueprint, jsonify

from routeflow.auth import require_role
from routeflow.blueprints import confirmed, created_id, register_error_handlers
from routeflow.services import workflow_service
from routeflow.utils.helpers import parse_int, request_field

logger = logging.getLogger(__name__)

workflow_bp = Blueprint("workflow", __name__, url_prefix="/api")
register_error_handlers(workflow_bp)


# ═════════════════════════════════════════════════════════════════════════════
# WORKFLOWS
# ═════════════════════════════════════════════════════════════════════════════

@workflow_bp.route("/workflow", methods=["GET"])
def list_workflows():
    return jsonify(workflow_service.list_workflows())


@workflow_bp.route("/workflow/new", methods=["POST"])
@require_role("admin")
def new_workflow():
    """Body: description"""
    workflow_id = workflow_service.create_workflow(request_field("description", ""))
    return created_id(workflow_id)


@workflow_bp.route("/workflow/<int:workflow_id>", methods=["GET"])
def get_workflow_steps(workflow_id):
    return jsonify(workflow_service.get_workflow_steps(workflow_id))


@workflow_bp.route("/workflow/<int:workflow_id>", methods=["DELETE"])
@require_role("admin")
def delete_workflow(workflow_id):
    workflow_service.delete_workflow(workflow_id)
    return confirmed()


@workflow_bp.route("/workflow/<int:workflow_id>/initialStep", methods=["POST"])
@require_role("admin")
def set_initial_step(workflow_id):
    """Body: stepID (0 clears the entry point)"""
    workflow_service.set_initial_step(workflow_id, parse_int(request_field("stepID")))
    return confirmed()


@workflow_bp.route("/workflow/<int:workflow_id>/editorPosition", methods=["POST"])
@require_role("admin")
def set_editor_position(workflow_id):
    """Body: stepID, x, y - negative or non-numeric coordinates store 0."""
    workflow_service.set_step_coordinates(
        workflow_id,
        parse_int(request_field("stepID")),
        parse_int(request_field("x")),
        parse_int(request_field("y")),
    )
    return confirmed()


# ═════════════════════════════════════════════════════════════════════════════
# STEPS
# ═════════════════════════════════════════════════════════════════════════════

@workflow_bp.route("/workflow/<int:workflow_id>/step", methods=["POST"])
@require_role("admin")
def new_step(workflow_id):
    """Body: stepTitle"""
    step_id = workflow_service.create_step(workflow_id, request_field("stepTitle", ""))
    return created_id(step_id)


@workflow_bp.route("/workflow/step/<int:step_id>", methods=["GET"])
def get_step(step_id):
    return jsonify(workflow_service.get_step(step_id))


@workflow_bp.route("/workflow/step/<int:step_id>/title", methods=["POST"])
@require_role("admin")
def update_step_title(step_id):
    """Body: title"""
    workflow_service.update_step_title(step_id, request_field("title", ""))
    return confirmed()


@workflow_bp.route("/workflow/step/<int:step_id>", methods=["DELETE"])
@require_role("admin")
def delete_step(step_id):
    workflow_service.delete_step(step_id)
    return confirmed()


# ═════════════════════════════════════════════════════════════════════════════
# ROUTES
# ═════════════════════════════════════════════════════════════════════════════

@workflow_bp.route("/workflow/<int:workflow_id>/route", methods=["GET"])
def list_routes(workflow_id):
    return jsonify(workflow_service.list_routes(workflow_id))


@workflow_bp.route("/workflow/<int:workflow_id>/action", methods=["POST"])
@require_role("admin")
def create_route(workflow_id):
    """Body: stepID, nextStepID, action, displayConditional?"""
    workflow_service.create_route(
        workflow_id,
        parse_int(request_field("stepID")),
        parse_int(request_field("nextStepID")),
        (request_field("action") or "").strip(),
        request_field("displayConditional"),
    )
    return confirmed()


@workflow_bp.route("/workflow/<int:workflow_id>/action", methods=["DELETE"])
@require_role("admin")
def remove_route(workflow_id):
    """Query: stepID, nextStepID, action"""
    workflow_service.remove_route(
        workflow_id,
        parse_int(request_field("stepID")),
        parse_int(request_field("nextStepID")),
        (request_field("action") or "").strip(),
    )
    return confirmed()
