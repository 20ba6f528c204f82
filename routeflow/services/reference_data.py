"""
Reference data - reserved requirements, the built-in requirement catalog and
the system actions the routing engine relies on.

seed_reference_data() is idempotent: existing rows are left untouched, so
administrator edits to built-in descriptions survive a restart.  It runs on
every startup (see create_app) and from ``flask seed-reference-data``.
"""

import logging

from routeflow.models import db
from routeflow.models.action import Action
from routeflow.models.dependency import RESERVED_DESCRIPTIONS, Dependency, Group

logger = logging.getLogger(__name__)

BUILT_IN_DEPENDENCIES = [
    (1, "Service Chief"),
    (8, "Quadrad"),
]

# (actionType, text, past tense, icon, alignment, sort, fillDependency)
SYSTEM_ACTIONS = [
    ("approve", "Approve", "Approved", "gnome-emblem-default.svg", "right", 0, 1),
    ("concur", "Concur", "Concurred", "go-next.svg", "right", 1, 1),
    ("defer", "Defer", "Deferred", "software-update-urgent.svg", "left", -5, -2),
    ("disapprove", "Disapprove", "Disapproved", "process-stop.svg", "left", -1, -1),
    ("sendback", "Return to Requestor", "Returned to Requestor", "edit-undo.svg", "left", 0, 0),
    ("submit", "Submit", "Submitted", "gnome-emblem-default.svg", "right", 0, 1),
    ("Note", "Note", "Note Added", "document-properties.svg", "right", 1, 0),
]

SAMPLE_GROUPS = [
    (206, "Group A"),
    (207, "Group B"),
]


def seed_reference_data(include_samples=False):
    """Insert missing reference rows.  Returns the number of rows added."""
    added = 0

    for reserved, description in RESERVED_DESCRIPTIONS.items():
        if db.session.get(Dependency, int(reserved)) is None:
            db.session.add(Dependency(id=int(reserved), description=description))
            added += 1

    for dependency_id, description in BUILT_IN_DEPENDENCIES:
        if db.session.get(Dependency, dependency_id) is None:
            db.session.add(Dependency(id=dependency_id, description=description))
            added += 1

    for action_type, text, past, icon, alignment, sort, fill in SYSTEM_ACTIONS:
        if db.session.get(Action, action_type) is None:
            db.session.add(Action(
                action_type=action_type,
                action_text=text,
                action_text_pasttense=past,
                action_icon=icon,
                action_alignment=alignment,
                sort=sort,
                fill_dependency=fill,
                deleted=0,
            ))
            added += 1

    if include_samples:
        for group_id, name in SAMPLE_GROUPS:
            if db.session.get(Group, group_id) is None:
                db.session.add(Group(id=group_id, name=name))
                added += 1

    db.session.commit()
    if added:
        logger.info("Seeded %d reference rows", added)
    return added
