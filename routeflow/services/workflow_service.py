"""
Workflow Store service - workflows, steps and the routes between them.

Rules:
  - All Workflow / WorkflowStep / WorkflowRoute writes go through this module.
  - db.session.commit() happens here, never in the blueprint.
  - Validation runs before the session is touched, so a raised
    ValidationError never leaves a partial mutation behind.
  - Text fields are stripped of markup on write.
"""

from __future__ import annotations

import logging

from sqlalchemy import select

from routeflow.core.exceptions import ConflictError, NotFoundError, ValidationError
from routeflow.models import db
from routeflow.models.action import Action
from routeflow.models.workflow import Workflow, WorkflowRoute, WorkflowStep
from routeflow.utils.helpers import check_length, column_length
from routeflow.utils.sanitize import strip_html

logger = logging.getLogger(__name__)


# ── Lookups ────────────────────────────────────────────────────────────────


def get_workflow_or_raise(workflow_id: int) -> Workflow:
    """Return the workflow or raise.

    Raises:
        ValidationError: workflow_id is unset (0 or negative).
        NotFoundError:   no such workflow.
    """
    if not workflow_id or workflow_id <= 0:
        raise ValidationError(
            "A valid workflowID is required",
            details={"workflowID": workflow_id},
        )
    workflow = db.session.get(Workflow, workflow_id)
    if workflow is None:
        raise NotFoundError(resource="Workflow", resource_id=workflow_id)
    return workflow


def get_step_or_raise(step_id: int) -> WorkflowStep:
    if not step_id or step_id <= 0:
        raise ValidationError("A valid stepID is required", details={"stepID": step_id})
    step = db.session.get(WorkflowStep, step_id)
    if step is None:
        raise NotFoundError(resource="WorkflowStep", resource_id=step_id)
    return step


def get_step_in_workflow(workflow_id: int, step_id: int) -> WorkflowStep:
    """Return a step after checking it belongs to ``workflow_id``."""
    get_workflow_or_raise(workflow_id)
    step = get_step_or_raise(step_id)
    if step.workflow_id != workflow_id:
        raise ValidationError(
            f"Step {step_id} is not part of workflow {workflow_id}",
            details={"workflowID": workflow_id, "stepID": step_id},
        )
    return step


# ── Workflows ──────────────────────────────────────────────────────────────


def create_workflow(description: str | None) -> int:
    """Create an empty workflow and return its new ID."""
    clean = check_length("description", strip_html(description), column_length(Workflow, "description"))
    workflow = Workflow(description=clean, initial_step_id=0)
    db.session.add(workflow)
    db.session.commit()
    logger.info("Workflow created", extra={"workflow_id": workflow.id})
    return workflow.id


def list_workflows() -> list[dict]:
    rows = db.session.execute(select(Workflow).order_by(Workflow.id)).scalars().all()
    return [w.to_dict() for w in rows]


def get_workflow_steps(workflow_id: int) -> list[dict]:
    workflow = get_workflow_or_raise(workflow_id)
    return [s.to_dict() for s in workflow.steps]


def set_initial_step(workflow_id: int, step_id: int) -> None:
    """Make ``step_id`` the entry point.  ``step_id`` 0 clears it."""
    workflow = get_workflow_or_raise(workflow_id)
    if step_id:
        get_step_in_workflow(workflow_id, step_id)
    workflow.initial_step_id = step_id or 0
    db.session.commit()
    logger.info(
        "Initial step set",
        extra={"workflow_id": workflow_id, "step_id": step_id},
    )


def delete_workflow(workflow_id: int) -> None:
    """Delete a workflow with its steps, step requirements and routes."""
    workflow = get_workflow_or_raise(workflow_id)
    step_count = len(workflow.steps)
    db.session.delete(workflow)
    db.session.commit()
    logger.info(
        "Workflow deleted (%d steps)", step_count,
        extra={"workflow_id": workflow_id},
    )


# ── Steps ──────────────────────────────────────────────────────────────────


def create_step(workflow_id: int, title: str | None) -> int:
    """Add a step to a workflow and return its new ID.

    The first step of a workflow without an entry point becomes its initial
    step.
    """
    clean = check_length("stepTitle", strip_html(title), column_length(WorkflowStep, "step_title"))
    workflow = get_workflow_or_raise(workflow_id)
    step = WorkflowStep(
        workflow_id=workflow.id,
        step_title=clean,
        pos_x=0,
        pos_y=0,
        indicator_id_for_assigned_emp_uid=0,
        indicator_id_for_assigned_group_id=0,
    )
    db.session.add(step)
    db.session.flush()
    if not workflow.initial_step_id:
        workflow.initial_step_id = step.id
    db.session.commit()
    logger.info(
        "Workflow step created",
        extra={"workflow_id": workflow_id, "step_id": step.id},
    )
    return step.id


def get_step(step_id: int) -> dict:
    return get_step_or_raise(step_id).to_dict()


def update_step_title(step_id: int, title: str | None) -> None:
    step = get_step_or_raise(step_id)
    clean = strip_html(title)
    if not clean:
        raise ValidationError("stepTitle is required", details={"stepTitle": "empty"})
    check_length("stepTitle", clean, column_length(WorkflowStep, "step_title"))
    step.step_title = clean
    db.session.commit()


def set_step_coordinates(workflow_id: int, step_id: int, x: int, y: int) -> tuple[int, int]:
    """Store the editor position of a step, clamping each axis at 0.

    Returns:
        The (x, y) pair actually stored.
    """
    step = get_step_in_workflow(workflow_id, step_id)
    step.pos_x = max(int(x), 0)
    step.pos_y = max(int(y), 0)
    db.session.commit()
    return step.pos_x, step.pos_y


def delete_step(step_id: int) -> None:
    """Delete a step, its requirement links and every route touching it."""
    step = get_step_or_raise(step_id)
    workflow = step.workflow

    routes = db.session.execute(
        select(WorkflowRoute).where(
            WorkflowRoute.workflow_id == workflow.id,
            (WorkflowRoute.step_id == step_id) | (WorkflowRoute.next_step_id == step_id),
        )
    ).scalars().all()
    for route in routes:
        db.session.delete(route)

    if workflow.initial_step_id == step_id:
        workflow.initial_step_id = 0

    db.session.delete(step)
    db.session.commit()
    logger.info(
        "Workflow step deleted (%d routes removed)", len(routes),
        extra={"workflow_id": workflow.id, "step_id": step_id},
    )


# ── Routes ─────────────────────────────────────────────────────────────────


def _validate_route(workflow_id: int, step_id: int, next_step_id: int, action_type: str) -> Action:
    get_step_in_workflow(workflow_id, step_id)
    if next_step_id:
        get_step_in_workflow(workflow_id, next_step_id)
    if not action_type:
        raise ValidationError("actionType is required", details={"actionType": "empty"})
    action = db.session.get(Action, action_type)
    if action is None or action.deleted:
        raise NotFoundError(resource="Action", resource_id=action_type)
    return action


def create_route(
    workflow_id: int,
    step_id: int,
    next_step_id: int,
    action_type: str,
    display_conditional: str | None = None,
) -> None:
    """Connect ``step_id`` to ``next_step_id`` through ``action_type``.

    Raises:
        ConflictError: the step already routes this action somewhere.
    """
    _validate_route(workflow_id, step_id, next_step_id, action_type)
    existing = db.session.execute(
        select(WorkflowRoute).where(
            WorkflowRoute.workflow_id == workflow_id,
            WorkflowRoute.step_id == step_id,
            WorkflowRoute.action_type == action_type,
        )
    ).scalar_one_or_none()
    if existing is not None:
        raise ConflictError(resource="WorkflowRoute", field="actionType", value=action_type)

    db.session.add(WorkflowRoute(
        workflow_id=workflow_id,
        step_id=step_id,
        next_step_id=next_step_id or 0,
        action_type=action_type,
        display_conditional=display_conditional or "",
    ))
    db.session.commit()
    logger.info(
        "Route created %s -> %s via %s", step_id, next_step_id, action_type,
        extra={"workflow_id": workflow_id, "step_id": step_id},
    )


def list_routes(workflow_id: int) -> list[dict]:
    get_workflow_or_raise(workflow_id)
    rows = db.session.execute(
        select(WorkflowRoute)
        .where(WorkflowRoute.workflow_id == workflow_id)
        .order_by(WorkflowRoute.step_id, WorkflowRoute.action_type)
    ).scalars().all()
    return [r.to_dict() for r in rows]


def remove_route(workflow_id: int, step_id: int, next_step_id: int, action_type: str) -> None:
    """Remove a route.  Removing a route that does not exist is a no-op."""
    get_workflow_or_raise(workflow_id)
    route = db.session.execute(
        select(WorkflowRoute).where(
            WorkflowRoute.workflow_id == workflow_id,
            WorkflowRoute.step_id == step_id,
            WorkflowRoute.next_step_id == (next_step_id or 0),
            WorkflowRoute.action_type == action_type,
        )
    ).scalar_one_or_none()
    if route is None:
        return
    db.session.delete(route)
    db.session.commit()
    logger.info(
        "Route removed %s -> %s via %s", step_id, next_step_id, action_type,
        extra={"workflow_id": workflow_id, "step_id": step_id},
    )
