"""
Action Catalog Blueprint.

Routes:
  POST   /api/system/action                  – create action (admin)   → "<actionType>"
  POST   /api/workflow/editAction/_<type>    – edit action (admin)     → "1"
  GET    /api/workflow/action/_<type>        – [action] or []
  DELETE /api/workflow/action/_<type>        – soft-delete (admin)     → "1"
  GET    /api/workflow/actions               – active actions by sort
  GET    /api/workflow/step/<sid>/actions    – [{actionType, actionText}] for a step

Numeric fields (sort, fillDependency) fall back to 0 on bad input; text and
icon scrubbing lives in action_service.
"""

import logging

from flask import Blueprint, jsonify

from routeflow.auth import require_role
from routeflow.blueprints import confirmed, created_id, register_error_handlers
from routeflow.services import action_service
from routeflow.utils.helpers import parse_int, request_field

logger = logging.getLogger(__name__)

action_bp = Blueprint("action", __name__, url_prefix="/api")
register_error_handlers(action_bp)


def _action_fields() -> dict:
    return {
        "action_text": request_field("actionText", ""),
        "action_text_pasttense": request_field("actionTextPasttense", ""),
        "action_icon": request_field("actionIcon", ""),
        "sort": parse_int(request_field("sort")),
        "fill_dependency": parse_int(request_field("fillDependency")),
        "alignment": request_field("actionAlignment"),
    }


@action_bp.route("/system/action", methods=["POST"])
@require_role("admin")
def new_action():
    action_type = action_service.create_action(**_action_fields())
    return created_id(action_type)


@action_bp.route("/workflow/editAction/_<action_type>", methods=["POST"])
@require_role("admin")
def edit_action(action_type):
    action_service.edit_action(action_type, **_action_fields())
    return confirmed()


@action_bp.route("/workflow/action/_<action_type>", methods=["GET"])
def get_action(action_type):
    return jsonify(action_service.get_actions_by_type(action_type))


@action_bp.route("/workflow/action/_<action_type>", methods=["DELETE"])
@require_role("admin")
def delete_action(action_type):
    action_service.delete_action(action_type)
    return confirmed()


@action_bp.route("/workflow/actions", methods=["GET"])
def list_actions():
    return jsonify(action_service.list_actions())


@action_bp.route("/workflow/step/<int:step_id>/actions", methods=["GET"])
def get_step_actions(step_id):
    return jsonify(action_service.get_step_actions(step_id))
