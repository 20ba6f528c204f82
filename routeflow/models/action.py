"""
Action Catalog model.

An action is a choice offered to the person handling a request at a step
(Approve, Return to Requestor, Note ...).  ``action_type`` is the natural
key; it is derived from the action text when the action is created and never
changes afterwards.

Actions are soft-deleted (``deleted = 1``) so that historical routes keep a
valid reference.
"""

from datetime import datetime, timezone

from routeflow.models import db

# Seeded actions the workflow engine depends on; they cannot be edited or deleted
SYSTEM_ACTION_TYPES = frozenset({
    "approve",
    "concur",
    "defer",
    "disapprove",
    "sendback",
    "submit",
})

VALID_ALIGNMENTS = frozenset({"left", "right"})


def _utcnow():
    return datetime.now(timezone.utc)


class Action(db.Model):
    __tablename__ = "actions"

    action_type = db.Column(db.String(50), primary_key=True)
    action_text = db.Column(db.String(50), nullable=False)
    action_text_pasttense = db.Column(db.String(50), nullable=False, default="")
    action_icon = db.Column(db.String(50), nullable=False, default="")
    action_alignment = db.Column(db.String(20), nullable=False, default="right")
    sort = db.Column(db.Integer, nullable=False, default=0)
    fill_dependency = db.Column(
        db.Integer,
        nullable=False,
        default=0,
        comment="Value written to the requirement when this action is taken",
    )
    deleted = db.Column(db.Integer, nullable=False, default=0)
    updated_at = db.Column(db.DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    @property
    def is_system(self) -> bool:
        return self.action_type in SYSTEM_ACTION_TYPES

    def to_dict(self):
        return {
            "actionType": self.action_type,
            "actionText": self.action_text,
            "actionTextPasttense": self.action_text_pasttense,
            "actionIcon": self.action_icon,
            "actionAlignment": self.action_alignment,
            "sort": self.sort or 0,
            "fillDependency": self.fill_dependency or 0,
            "deleted": self.deleted or 0,
        }

    def __repr__(self):
        return f"<Action {self.action_type} deleted={self.deleted}>"
