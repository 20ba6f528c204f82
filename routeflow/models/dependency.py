"""
Dependency Registry models - requirements ("dependencies") and their links.

Dependency IDs fall into three classes:

    Reserved   negative IDs, behaviour defined by the system
               (-1 Person Designated, -2 Requestor Followup,
                -3 Group Designated, -4 System Agent)
    BuiltIn    1..BUILT_IN_MAX_ID, the seeded catalog (1 Service Chief, 8 Quadrad ...)
    Custom     anything above BUILT_IN_MAX_ID, created by administrators

Call sites never compare raw IDs against these ranges; they ask
``classify_dependency(dependency_id)`` and read the flags on the result.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum, IntEnum

from routeflow.models import db

BUILT_IN_MAX_ID = 8


class DependencyKind(str, Enum):
    RESERVED = "reserved"
    BUILT_IN = "built_in"
    CUSTOM = "custom"


class ReservedDependency(IntEnum):
    PERSON_DESIGNATED = -1
    REQUESTOR_FOLLOWUP = -2
    GROUP_DESIGNATED = -3
    SYSTEM_AGENT = -4


RESERVED_DESCRIPTIONS = {
    ReservedDependency.PERSON_DESIGNATED: "Person Designated",
    ReservedDependency.REQUESTOR_FOLLOWUP: "Requestor Followup",
    ReservedDependency.GROUP_DESIGNATED: "Group Designated",
    ReservedDependency.SYSTEM_AGENT: "System Agent",
}

# Description shown once the requirement is attached to a step
RESOLVED_DESCRIPTIONS = {
    ReservedDependency.PERSON_DESIGNATED: "Person Designated by the Requestor",
    ReservedDependency.GROUP_DESIGNATED: "Group Designated by the Requestor",
}

# Reserved requirements a step may carry. -4 is driven by the system only.
ASSIGNABLE_RESERVED = frozenset({
    ReservedDependency.PERSON_DESIGNATED,
    ReservedDependency.REQUESTOR_FOLLOWUP,
    ReservedDependency.GROUP_DESIGNATED,
})


@dataclass(frozen=True)
class DependencyClass:
    """Tagged classification of a dependency ID."""

    kind: DependencyKind
    dependency_id: int
    reserved: ReservedDependency | None = None

    @property
    def is_reserved(self) -> bool:
        return self.kind is DependencyKind.RESERVED

    @property
    def assignable(self) -> bool:
        """True when the dependency may be linked to a workflow step."""
        if self.is_reserved:
            return self.reserved in ASSIGNABLE_RESERVED
        return True

    @property
    def editable(self) -> bool:
        """True when description and group privileges may be changed."""
        return not self.is_reserved

    @property
    def designator_field(self) -> str | None:
        """Step attribute holding the designator indicator, if any."""
        if self.reserved is ReservedDependency.PERSON_DESIGNATED:
            return "indicator_id_for_assigned_emp_uid"
        if self.reserved is ReservedDependency.GROUP_DESIGNATED:
            return "indicator_id_for_assigned_group_id"
        return None


def classify_dependency(dependency_id: int) -> DependencyClass:
    """Classify a dependency ID as reserved, built-in, or custom."""
    dependency_id = int(dependency_id)
    if dependency_id < 0:
        try:
            reserved = ReservedDependency(dependency_id)
        except ValueError:
            reserved = None
        return DependencyClass(DependencyKind.RESERVED, dependency_id, reserved)
    if dependency_id <= BUILT_IN_MAX_ID:
        return DependencyClass(DependencyKind.BUILT_IN, dependency_id)
    return DependencyClass(DependencyKind.CUSTOM, dependency_id)


def _utcnow():
    return datetime.now(timezone.utc)


class Group(db.Model):
    """User group that can be granted privileges on a requirement."""

    __tablename__ = "groups"

    id = db.Column(db.Integer, primary_key=True, autoincrement=False)
    name = db.Column(db.String(250), nullable=False)

    def to_dict(self):
        return {"groupID": self.id, "name": self.name}


class Dependency(db.Model):
    """Approval gate definition (reserved, built-in, or custom)."""

    __tablename__ = "dependencies"

    # IDs are allocated by dependency_service, never by the database
    id = db.Column(db.Integer, primary_key=True, autoincrement=False)
    description = db.Column(db.String(50), nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)

    privileges = db.relationship(
        "DependencyPrivilege",
        backref="dependency",
        lazy="select",
        cascade="all, delete-orphan",
        order_by="DependencyPrivilege.group_id",
    )
    step_links = db.relationship(
        "StepDependency",
        backref="dependency",
        lazy="select",
        cascade="all, delete-orphan",
    )

    @property
    def classification(self) -> DependencyClass:
        return classify_dependency(self.id)

    def to_dict(self):
        return {
            "dependencyID": self.id,
            "description": self.description,
            "kind": self.classification.kind.value,
        }

    def __repr__(self):
        return f"<Dependency #{self.id} {self.description!r}>"


class DependencyPrivilege(db.Model):
    """Grants a group the right to fulfil a requirement."""

    __tablename__ = "dependency_privs"

    dependency_id = db.Column(
        db.Integer,
        db.ForeignKey("dependencies.id", ondelete="CASCADE"),
        primary_key=True,
    )
    group_id = db.Column(
        db.Integer,
        db.ForeignKey("groups.id", ondelete="CASCADE"),
        primary_key=True,
    )

    group = db.relationship("Group", lazy="joined")


class StepDependency(db.Model):
    """Link between a workflow step and a requirement."""

    __tablename__ = "step_dependencies"

    step_id = db.Column(
        db.Integer,
        db.ForeignKey("workflow_steps.id", ondelete="CASCADE"),
        primary_key=True,
    )
    dependency_id = db.Column(
        db.Integer,
        db.ForeignKey("dependencies.id", ondelete="CASCADE"),
        primary_key=True,
    )

    def resolved_description(self) -> str:
        reserved = self.dependency.classification.reserved
        return RESOLVED_DESCRIPTIONS.get(reserved, self.dependency.description)

    def resolve(self) -> list[dict]:
        """Expand into display entries, one per privileged group."""
        base = {
            "stepID": self.step_id,
            "dependencyID": self.dependency_id,
            "description": self.resolved_description(),
            "indicatorID_for_assigned_empUID": self.step.indicator_id_for_assigned_emp_uid or 0,
            "indicatorID_for_assigned_groupID": self.step.indicator_id_for_assigned_group_id or 0,
        }
        privileges = self.dependency.privileges
        if not privileges:
            return [{**base, "groupID": None, "name": None}]
        return [
            {**base, "groupID": priv.group_id, "name": priv.group.name}
            for priv in privileges
        ]
