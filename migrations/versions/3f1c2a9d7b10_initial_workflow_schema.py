"""initial_workflow_schema

Creates the workflow routing tables:
  - workflows, workflow_steps, workflow_routes   - Workflow Store
  - groups, dependencies, dependency_privs,
    step_dependencies                            - Dependency Registry
  - actions                                      - Action Catalog

Tables created conditionally (IF NOT EXISTS semantics) so the revision can be
stamped onto databases that already received these tables via db.create_all()
in a development environment.

Revision ID: 3f1c2a9d7b10
Revises:
Create Date: 2026-10-17 09:00:00.000000
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect as sa_inspect


# revision identifiers, used by Alembic.
revision = '3f1c2a9d7b10'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    inspector = sa_inspect(bind)
    existing = set(inspector.get_table_names())

    # ── Workflows ─────────────────────────────────────────────────────────
    if "workflows" not in existing:
        op.create_table(
            "workflows",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("initial_step_id", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("description", sa.String(length=255), nullable=False, server_default=""),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
            sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
            sa.PrimaryKeyConstraint("id"),
        )

    # ── Actions ───────────────────────────────────────────────────────────
    if "actions" not in existing:
        op.create_table(
            "actions",
            sa.Column("action_type", sa.String(length=50), nullable=False),
            sa.Column("action_text", sa.String(length=50), nullable=False),
            sa.Column("action_text_pasttense", sa.String(length=50), nullable=False, server_default=""),
            sa.Column("action_icon", sa.String(length=50), nullable=False, server_default=""),
            sa.Column("action_alignment", sa.String(length=20), nullable=False, server_default="right"),
            sa.Column("sort", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("fill_dependency", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("deleted", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
            sa.PrimaryKeyConstraint("action_type"),
        )

    # ── Workflow steps ────────────────────────────────────────────────────
    if "workflow_steps" not in existing:
        op.create_table(
            "workflow_steps",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("workflow_id", sa.Integer(), nullable=False),
            sa.Column("step_title", sa.String(length=64), nullable=False, server_default=""),
            sa.Column("pos_x", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("pos_y", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("indicator_id_for_assigned_emp_uid", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("indicator_id_for_assigned_group_id", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
            sa.ForeignKeyConstraint(["workflow_id"], ["workflows.id"], ondelete="CASCADE"),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_workflow_steps_workflow_id", "workflow_steps", ["workflow_id"])

    # ── Workflow routes ───────────────────────────────────────────────────
    if "workflow_routes" not in existing:
        op.create_table(
            "workflow_routes",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("workflow_id", sa.Integer(), nullable=False),
            sa.Column("step_id", sa.Integer(), nullable=False),
            sa.Column("next_step_id", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("action_type", sa.String(length=50), nullable=False),
            sa.Column("display_conditional", sa.Text(), nullable=False, server_default=""),
            sa.ForeignKeyConstraint(["workflow_id"], ["workflows.id"], ondelete="CASCADE"),
            sa.ForeignKeyConstraint(["action_type"], ["actions.action_type"], ondelete="CASCADE"),
            sa.PrimaryKeyConstraint("id"),
            sa.UniqueConstraint("workflow_id", "step_id", "action_type", name="uq_route_step_action"),
        )
        op.create_index("ix_workflow_routes_workflow_id", "workflow_routes", ["workflow_id"])
        op.create_index("ix_workflow_routes_step_id", "workflow_routes", ["step_id"])

    # ── Groups ────────────────────────────────────────────────────────────
    if "groups" not in existing:
        op.create_table(
            "groups",
            sa.Column("id", sa.Integer(), autoincrement=False, nullable=False),
            sa.Column("name", sa.String(length=250), nullable=False),
            sa.PrimaryKeyConstraint("id"),
        )

    # ── Requirements ──────────────────────────────────────────────────────
    if "dependencies" not in existing:
        op.create_table(
            "dependencies",
            sa.Column("id", sa.Integer(), autoincrement=False, nullable=False),
            sa.Column("description", sa.String(length=50), nullable=False),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
            sa.PrimaryKeyConstraint("id"),
        )

    if "dependency_privs" not in existing:
        op.create_table(
            "dependency_privs",
            sa.Column("dependency_id", sa.Integer(), nullable=False),
            sa.Column("group_id", sa.Integer(), nullable=False),
            sa.ForeignKeyConstraint(["dependency_id"], ["dependencies.id"], ondelete="CASCADE"),
            sa.ForeignKeyConstraint(["group_id"], ["groups.id"], ondelete="CASCADE"),
            sa.PrimaryKeyConstraint("dependency_id", "group_id"),
        )

    if "step_dependencies" not in existing:
        op.create_table(
            "step_dependencies",
            sa.Column("step_id", sa.Integer(), nullable=False),
            sa.Column("dependency_id", sa.Integer(), nullable=False),
            sa.ForeignKeyConstraint(["step_id"], ["workflow_steps.id"], ondelete="CASCADE"),
            sa.ForeignKeyConstraint(["dependency_id"], ["dependencies.id"], ondelete="CASCADE"),
            sa.PrimaryKeyConstraint("step_id", "dependency_id"),
        )


def downgrade():
    for table in (
        "step_dependencies",
        "dependency_privs",
        "dependencies",
        "groups",
        "workflow_routes",
        "workflow_steps",
        "actions",
        "workflows",
    ):
        op.drop_table(table)
