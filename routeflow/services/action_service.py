"""
Action Catalog service.

Sanitisation contract (applied on create AND edit):
    actionText / actionTextPasttense   HTML stripped, inner text kept
    actionIcon                         reduced to safe file-name characters
    sort / fillDependency              non-numeric input stored as 0
                                       (parsed by the blueprint)

actionType is derived once, at creation, from the sanitised text:
characters outside [A-Za-z0-9_] are dropped and the rest lower-cased.
"""

from __future__ import annotations

import logging
import re

from sqlalchemy import select

from routeflow.core.exceptions import ConflictError, NotFoundError, ValidationError
from routeflow.models import db
from routeflow.models.action import VALID_ALIGNMENTS, Action
from routeflow.models.workflow import WorkflowRoute
from routeflow.services.workflow_service import get_step_or_raise
from routeflow.utils.helpers import check_length, column_length
from routeflow.utils.sanitize import scrub_filename, strip_html

logger = logging.getLogger(__name__)

_ACTION_TYPE_UNSAFE = re.compile(r"[^A-Za-z0-9_]")


def derive_action_type(action_text: str | None) -> str:
    """``"<script>alert(1)</script>"`` -> ``"alert1"``."""
    return _ACTION_TYPE_UNSAFE.sub("", strip_html(action_text)).lower()


def _apply_fields(
    action: Action,
    action_text: str | None,
    action_text_pasttense: str | None,
    action_icon: str | None,
    sort: int,
    fill_dependency: int,
    alignment: str | None,
) -> None:
    text = strip_html(action_text)
    if not text:
        raise ValidationError("actionText is required", details={"actionText": "empty"})
    alignment = (alignment or "right").strip().lower()
    if alignment not in VALID_ALIGNMENTS:
        alignment = "right"

    past = strip_html(action_text_pasttense)
    icon = scrub_filename(action_icon)
    for field, value, column in (
        ("actionText", text, "action_text"),
        ("actionTextPasttense", past, "action_text_pasttense"),
        ("actionIcon", icon, "action_icon"),
    ):
        check_length(field, value, column_length(Action, column))

    action.action_text = text
    action.action_text_pasttense = past
    action.action_icon = icon
    action.action_alignment = alignment
    action.sort = sort
    action.fill_dependency = fill_dependency


def _get_active_or_raise(action_type: str) -> Action:
    action = db.session.get(Action, action_type)
    if action is None or action.deleted:
        raise NotFoundError(resource="Action", resource_id=action_type)
    return action


def _require_custom(action: Action, operation: str) -> None:
    if action.is_system:
        raise ValidationError(
            f"Action '{action.action_type}' is a system action and cannot be {operation}",
            details={"actionType": action.action_type},
        )


# ── Public API ─────────────────────────────────────────────────────────────────


def create_action(
    action_text: str | None,
    action_text_pasttense: str | None,
    action_icon: str | None,
    sort: int = 0,
    fill_dependency: int = 0,
    alignment: str | None = None,
) -> str:
    """Create an action and return its derived actionType.

    A soft-deleted action with the same type is revived with the new values.

    Raises:
        ValidationError: text sanitises to nothing usable as a type.
        ConflictError:   an active action already uses the type.
    """
    action_type = derive_action_type(action_text)
    if not action_type:
        raise ValidationError(
            "actionText must contain at least one letter or digit",
            details={"actionText": "empty"},
        )

    action = db.session.get(Action, action_type)
    if action is not None and not action.deleted:
        raise ConflictError(resource="Action", field="actionType", value=action_type)
    revived = action is not None
    if not revived:
        action = Action(action_type=action_type)

    _apply_fields(action, action_text, action_text_pasttense, action_icon,
                  sort, fill_dependency, alignment)
    if not revived:
        db.session.add(action)
    action.deleted = 0
    db.session.commit()
    logger.info("Action created: %s", action_type)
    return action_type


def edit_action(
    action_type: str,
    action_text: str | None,
    action_text_pasttense: str | None,
    action_icon: str | None,
    sort: int = 0,
    fill_dependency: int = 0,
    alignment: str | None = None,
) -> None:
    """Overwrite every editable field of an action in one commit."""
    action = _get_active_or_raise(action_type)
    _require_custom(action, "edited")
    _apply_fields(action, action_text, action_text_pasttense, action_icon,
                  sort, fill_dependency, alignment)
    db.session.commit()
    logger.info("Action edited: %s", action_type)


def delete_action(action_type: str) -> None:
    """Soft-delete an action; it disappears from every read path."""
    action = _get_active_or_raise(action_type)
    _require_custom(action, "deleted")
    action.deleted = 1
    db.session.commit()
    logger.info("Action deleted: %s", action_type)


def get_actions_by_type(action_type: str) -> list[dict]:
    """Return the active action with this type as a 0- or 1-element list."""
    rows = db.session.execute(
        select(Action).where(Action.action_type == action_type, Action.deleted == 0)
    ).scalars().all()
    return [a.to_dict() for a in rows]


def list_actions() -> list[dict]:
    rows = db.session.execute(
        select(Action).where(Action.deleted == 0).order_by(Action.sort, Action.action_type)
    ).scalars().all()
    return [a.to_dict() for a in rows]


def get_step_actions(step_id: int) -> list[dict]:
    """Actions available at a step, ordered by the action's sort value."""
    step = get_step_or_raise(step_id)
    rows = db.session.execute(
        select(Action)
        .join(WorkflowRoute, WorkflowRoute.action_type == Action.action_type)
        .where(
            WorkflowRoute.workflow_id == step.workflow_id,
            WorkflowRoute.step_id == step.id,
            Action.deleted == 0,
        )
        .order_by(Action.sort, Action.action_type)
    ).scalars().all()
    return [{"actionType": a.action_type, "actionText": a.action_text} for a in rows]
