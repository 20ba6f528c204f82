"""
Workflow Store models - Workflow, WorkflowStep, WorkflowRoute.

A workflow is a directed graph of steps.  Routes are the edges: taking
``action_type`` at ``step_id`` moves a request to ``next_step_id``
(0 = the request leaves the workflow).

Wire format:
    ``to_dict()`` emits the camelCase keys the HTTP surface has always used
    (``workflowID``, ``posX``, ``indicatorID_for_assigned_empUID`` ...), not
    the snake_case attribute names.
"""

from datetime import datetime, timezone

from routeflow.models import db


def _utcnow():
    return datetime.now(timezone.utc)


class Workflow(db.Model):
    """An approval/routing process made of steps."""

    __tablename__ = "workflows"

    id = db.Column(db.Integer, primary_key=True)
    initial_step_id = db.Column(
        db.Integer,
        nullable=False,
        default=0,
        comment="Entry step. 0 = unset. Plain integer to avoid a circular FK with workflow_steps",
    )
    description = db.Column(db.String(255), nullable=False, default="")
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    steps = db.relationship(
        "WorkflowStep",
        backref="workflow",
        lazy="select",
        cascade="all, delete-orphan",
        order_by="WorkflowStep.id",
    )
    routes = db.relationship(
        "WorkflowRoute",
        backref="workflow",
        lazy="select",
        cascade="all, delete-orphan",
    )

    def to_dict(self):
        return {
            "workflowID": self.id,
            "initialStepID": self.initial_step_id or 0,
            "description": self.description,
        }

    def __repr__(self):
        return f"<Workflow #{self.id} {self.description!r}>"


class WorkflowStep(db.Model):
    """A node in a workflow's routing graph."""

    __tablename__ = "workflow_steps"

    id = db.Column(db.Integer, primary_key=True)
    workflow_id = db.Column(
        db.Integer,
        db.ForeignKey("workflows.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    step_title = db.Column(db.String(64), nullable=False, default="")

    # Layout position in the workflow editor; never negative
    pos_x = db.Column(db.Integer, nullable=False, default=0)
    pos_y = db.Column(db.Integer, nullable=False, default=0)

    # Form fields that name the person / group fulfilling the -1 / -3 requirements
    indicator_id_for_assigned_emp_uid = db.Column(
        db.Integer,
        nullable=False,
        default=0,
        comment="Indicator holding the designated employee. 0 = unset",
    )
    indicator_id_for_assigned_group_id = db.Column(
        db.Integer,
        nullable=False,
        default=0,
        comment="Indicator holding the designated group. 0 = unset",
    )

    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)

    dependency_links = db.relationship(
        "StepDependency",
        backref="step",
        lazy="select",
        cascade="all, delete-orphan",
    )

    def to_dict(self):
        return {
            "workflowID": self.workflow_id,
            "stepID": self.id,
            "stepTitle": self.step_title,
            "posX": self.pos_x or 0,
            "posY": self.pos_y or 0,
            "indicatorID_for_assigned_empUID": self.indicator_id_for_assigned_emp_uid or 0,
            "indicatorID_for_assigned_groupID": self.indicator_id_for_assigned_group_id or 0,
        }

    def __repr__(self):
        return f"<WorkflowStep #{self.id} wf={self.workflow_id} {self.step_title!r}>"


class WorkflowRoute(db.Model):
    """Edge of the routing graph: (step, action) -> next step."""

    __tablename__ = "workflow_routes"

    id = db.Column(db.Integer, primary_key=True)
    workflow_id = db.Column(
        db.Integer,
        db.ForeignKey("workflows.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    step_id = db.Column(db.Integer, nullable=False, index=True)
    next_step_id = db.Column(
        db.Integer,
        nullable=False,
        default=0,
        comment="Destination step. 0 = end of workflow",
    )
    action_type = db.Column(
        db.String(50),
        db.ForeignKey("actions.action_type", ondelete="CASCADE"),
        nullable=False,
    )
    display_conditional = db.Column(db.Text, nullable=False, default="")

    action = db.relationship("Action", lazy="joined")

    __table_args__ = (
        db.UniqueConstraint("workflow_id", "step_id", "action_type", name="uq_route_step_action"),
    )

    def to_dict(self):
        return {
            "workflowID": self.workflow_id,
            "stepID": self.step_id,
            "nextStepID": self.next_step_id or 0,
            "actionType": self.action_type,
            "displayConditional": self.display_conditional or "",
        }
