"""
Dependency Registry service - requirement definitions, group privileges,
and the requirement links carried by workflow steps.

Design decisions:
    - Reserved requirements are recognised through classify_dependency();
      no raw ID-range comparisons outside models/dependency.py.
    - Reserved requirements cannot be edited or granted privileges, and only
      the assignable ones (-1, -2, -3) can be linked to a step.  Violations
      raise ReservedDependencyError (HTTP 400) before any write.
    - New requirement IDs are allocated here as max(highest ID, BUILT_IN_MAX_ID) + 1
      so custom requirements never collide with the built-in catalog.
    - Linking, granting and unlinking are idempotent.
    - Unlinking -1 / -3 resets the step's designator indicator to 0.
"""

from __future__ import annotations

import logging

from sqlalchemy import func, select

from routeflow.core.exceptions import NotFoundError, ReservedDependencyError, ValidationError
from routeflow.models import db
from routeflow.models.dependency import (
    BUILT_IN_MAX_ID,
    Dependency,
    DependencyPrivilege,
    Group,
    StepDependency,
    classify_dependency,
)
from routeflow.services.workflow_service import get_step_in_workflow, get_step_or_raise
from routeflow.utils.helpers import check_length, column_length
from routeflow.utils.sanitize import strip_html

logger = logging.getLogger(__name__)

# Step attribute per designator field kind exposed on the HTTP surface
INDICATOR_FIELDS = {
    "empUID": "indicator_id_for_assigned_emp_uid",
    "groupID": "indicator_id_for_assigned_group_id",
}


# ── Private helpers ────────────────────────────────────────────────────────────


def _get_dependency_or_raise(dependency_id: int) -> Dependency:
    dependency = db.session.get(Dependency, dependency_id)
    if dependency is None:
        raise NotFoundError(resource="Dependency", resource_id=dependency_id)
    return dependency


def _require_editable(dependency_id: int, operation: str) -> None:
    if not classify_dependency(dependency_id).editable:
        logger.warning(
            "Rejected %s on reserved requirement", operation,
            extra={"dependency_id": dependency_id},
        )
        raise ReservedDependencyError(dependency_id, operation)


def _clean_description(description: str | None) -> str:
    clean = strip_html(description)
    if not clean:
        raise ValidationError("description is required", details={"description": "empty"})
    return check_length("description", clean, column_length(Dependency, "description"))


def _next_dependency_id() -> int:
    highest = db.session.execute(select(func.max(Dependency.id))).scalar()
    return max(highest or 0, BUILT_IN_MAX_ID) + 1


# ── Requirement definitions ───────────────────────────────────────────────────


def create_dependency(description: str | None) -> int:
    """Create a custom requirement and return its ID (always > BUILT_IN_MAX_ID)."""
    clean = _clean_description(description)
    dependency = Dependency(id=_next_dependency_id(), description=clean)
    db.session.add(dependency)
    db.session.commit()
    logger.info("Requirement created", extra={"dependency_id": dependency.id})
    return dependency.id


def list_dependencies() -> list[dict]:
    rows = db.session.execute(select(Dependency).order_by(Dependency.id)).scalars().all()
    return [d.to_dict() for d in rows]


def update_dependency(dependency_id: int, description: str | None) -> None:
    """Rename a built-in or custom requirement."""
    _require_editable(dependency_id, "edited")
    dependency = _get_dependency_or_raise(dependency_id)
    dependency.description = _clean_description(description)
    db.session.commit()
    logger.info("Requirement renamed", extra={"dependency_id": dependency_id})


# ── Group directory ───────────────────────────────────────────────────────────


def list_groups() -> list[dict]:
    rows = db.session.execute(select(Group).order_by(Group.id)).scalars().all()
    return [g.to_dict() for g in rows]


def upsert_group(group_id: int, name: str | None) -> bool:
    """Register a group or rename an existing one.  Returns True when created.

    Group IDs come from the organisation's directory, so they are supplied
    by the caller rather than allocated here.
    """
    if group_id <= 0:
        raise ValidationError("groupID must be a positive integer", details={"groupID": group_id})
    clean = strip_html(name)
    if not clean:
        raise ValidationError("name is required", details={"name": "empty"})
    check_length("name", clean, column_length(Group, "name"))

    group = db.session.get(Group, group_id)
    created = group is None
    if created:
        group = Group(id=group_id, name=clean)
        db.session.add(group)
    else:
        group.name = clean
    db.session.commit()
    logger.info("Group %s %s", group_id, "registered" if created else "renamed")
    return created


# ── Group privileges ──────────────────────────────────────────────────────────


def set_group_privilege(dependency_id: int, group_id: int) -> None:
    """Allow ``group_id`` to fulfil the requirement."""
    _require_editable(dependency_id, "assigned privileges")
    dependency = _get_dependency_or_raise(dependency_id)
    if db.session.get(Group, group_id) is None:
        raise NotFoundError(resource="Group", resource_id=group_id)

    existing = db.session.get(DependencyPrivilege, (dependency.id, group_id))
    if existing is None:
        db.session.add(DependencyPrivilege(dependency_id=dependency.id, group_id=group_id))
        db.session.commit()
    logger.info(
        "Group %s granted requirement privileges", group_id,
        extra={"dependency_id": dependency_id},
    )


def get_dependency_privileges(dependency_id: int) -> list[dict]:
    dependency = _get_dependency_or_raise(dependency_id)
    return [
        {"dependencyID": dependency.id, **priv.group.to_dict()}
        for priv in dependency.privileges
    ]


def remove_group_privilege(dependency_id: int, group_id: int) -> None:
    _require_editable(dependency_id, "assigned privileges")
    _get_dependency_or_raise(dependency_id)
    existing = db.session.get(DependencyPrivilege, (dependency_id, group_id))
    if existing is None:
        return
    db.session.delete(existing)
    db.session.commit()
    logger.info(
        "Group %s privileges revoked", group_id,
        extra={"dependency_id": dependency_id},
    )


# ── Step links ────────────────────────────────────────────────────────────────


def link_step_dependency(step_id: int, dependency_id: int, workflow_id: int) -> None:
    """Attach a requirement to a step of ``workflow_id``."""
    if not classify_dependency(dependency_id).assignable:
        logger.warning(
            "Rejected link of reserved requirement",
            extra={"dependency_id": dependency_id, "step_id": step_id},
        )
        raise ReservedDependencyError(dependency_id, "assigned to a step")
    step = get_step_in_workflow(workflow_id, step_id)
    dependency = _get_dependency_or_raise(dependency_id)

    existing = db.session.get(StepDependency, (step.id, dependency.id))
    if existing is None:
        db.session.add(StepDependency(step_id=step.id, dependency_id=dependency.id))
        db.session.commit()
    logger.info(
        "Requirement linked to step",
        extra={"workflow_id": workflow_id, "step_id": step_id, "dependency_id": dependency_id},
    )


def unlink_step_dependency(step_id: int, dependency_id: int, workflow_id: int) -> None:
    """Detach a requirement from a step.

    Removing the person (-1) or group (-3) designated requirement also clears
    the step's matching designator indicator.
    """
    if not classify_dependency(dependency_id).assignable:
        raise ReservedDependencyError(dependency_id, "removed from a step")
    step = get_step_in_workflow(workflow_id, step_id)

    existing = db.session.get(StepDependency, (step.id, dependency_id))
    if existing is not None:
        db.session.delete(existing)

    designator_field = classify_dependency(dependency_id).designator_field
    if designator_field:
        setattr(step, designator_field, 0)

    db.session.commit()
    logger.info(
        "Requirement unlinked from step",
        extra={"workflow_id": workflow_id, "step_id": step_id, "dependency_id": dependency_id},
    )


def set_step_indicator(step_id: int, field_kind: str, indicator_id: int) -> None:
    """Bind a form indicator to the step's person or group designator field."""
    attr = INDICATOR_FIELDS.get(field_kind)
    if attr is None:
        raise ValidationError(
            f"Unknown designator field '{field_kind}'",
            details={"valid_fields": sorted(INDICATOR_FIELDS)},
        )
    step = get_step_or_raise(step_id)
    setattr(step, attr, max(int(indicator_id), 0))
    db.session.commit()
    logger.info(
        "Designator indicator %s set to %s", field_kind, indicator_id,
        extra={"workflow_id": step.workflow_id, "step_id": step_id},
    )


def get_step_dependencies(step_id: int) -> list[dict]:
    """Resolve every requirement of a step to its display form.

    Ordered by dependencyID, then groupID; a requirement granted to N groups
    yields N entries.
    """
    step = get_step_or_raise(step_id)
    links = sorted(step.dependency_links, key=lambda link: link.dependency_id)
    resolved = []
    for link in links:
        resolved.extend(link.resolve())
    return resolved
