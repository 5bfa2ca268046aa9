"""Create timeline and flow builder tables

Revision ID: 5f3c2a9d8e41
Revises:
Create Date: 2025-09-01 12:00:00

"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "5f3c2a9d8e41"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("full_name", sa.String(), nullable=True),
        sa.Column("hashed_password", sa.String(), nullable=False),
        sa.Column("role", sa.String(), nullable=False, server_default="CLIENTE"),
        sa.Column("points", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("monthly_fee", sa.Numeric(10, 2), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "timeline_templates",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("duration_months", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_timeline_templates_id", "timeline_templates", ["id"])

    op.create_table(
        "timeline_template_items",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "template_id",
            sa.Integer(),
            sa.ForeignKey("timeline_templates.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category", sa.String(), nullable=False),
        sa.Column("display_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "parent_id",
            sa.Integer(),
            sa.ForeignKey("timeline_template_items.id"),
            nullable=True,
        ),
        sa.Column("created_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_timeline_template_items_id", "timeline_template_items", ["id"])
    op.create_index(
        "ix_timeline_template_items_template_id",
        "timeline_template_items",
        ["template_id"],
    )

    op.create_table(
        "client_timelines",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "client_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "template_id",
            sa.Integer(),
            sa.ForeignKey("timeline_templates.id"),
            nullable=True,
        ),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_client_timelines_id", "client_timelines", ["id"])
    op.create_index("ix_client_timelines_client_id", "client_timelines", ["client_id"])

    op.create_table(
        "timeline_items",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "client_timeline_id",
            sa.Integer(),
            sa.ForeignKey("client_timelines.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "template_item_id",
            sa.Integer(),
            sa.ForeignKey("timeline_template_items.id"),
            nullable=True,
        ),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("due_date", sa.Date(), nullable=False),
        sa.Column("status", sa.String(), nullable=False, server_default="PENDENTE"),
        sa.Column("progress_status", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_timeline_items_id", "timeline_items", ["id"])
    op.create_index(
        "ix_timeline_items_client_timeline_id", "timeline_items", ["client_timeline_id"]
    )

    op.create_table(
        "indications",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "client_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("indicated_name", sa.String(), nullable=False),
        sa.Column("indicated_email", sa.String(), nullable=True),
        sa.Column("indicated_phone", sa.String(), nullable=True),
        sa.Column("status", sa.String(), nullable=False, server_default="PENDENTE"),
        sa.Column("points_awarded", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_indications_id", "indications", ["id"])
    op.create_index("ix_indications_client_id", "indications", ["client_id"])

    op.create_table(
        "point_history",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "client_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("points_change", sa.Integer(), nullable=False),
        sa.Column("reason", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_point_history_id", "point_history", ["id"])
    op.create_index("ix_point_history_client_id", "point_history", ["client_id"])

    op.create_table(
        "flows",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column(
            "template_id",
            sa.Integer(),
            sa.ForeignKey("timeline_templates.id", ondelete="CASCADE"),
            nullable=True,
        ),
        sa.Column(
            "client_timeline_id",
            sa.Integer(),
            sa.ForeignKey("client_timelines.id", ondelete="CASCADE"),
            nullable=True,
            unique=True,
        ),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("created_by", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.CheckConstraint(
            "template_id IS NULL OR client_timeline_id IS NULL",
            name="ck_flows_single_binding",
        ),
    )
    op.create_index("ix_flows_id", "flows", ["id"])
    op.create_index("ix_flows_template_id", "flows", ["template_id"])

    op.create_table(
        "timeline_nodes",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "flow_id",
            sa.Integer(),
            sa.ForeignKey("flows.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("node_type", sa.String(), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("position_x", sa.Float(), nullable=False),
        sa.Column("position_y", sa.Float(), nullable=False),
        sa.Column("width", sa.Float(), nullable=True),
        sa.Column("height", sa.Float(), nullable=True),
        sa.Column("color", sa.String(), nullable=True),
        sa.Column("glow_color", sa.String(), nullable=True),
        sa.Column("node_shape", sa.String(), nullable=False, server_default="rounded"),
        sa.Column("created_by", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.UniqueConstraint("id", "flow_id", name="uq_timeline_nodes_id_flow"),
    )
    op.create_index("ix_timeline_nodes_id", "timeline_nodes", ["id"])
    op.create_index("ix_timeline_nodes_flow_id", "timeline_nodes", ["flow_id"])

    op.create_table(
        "timeline_edges",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "flow_id",
            sa.Integer(),
            sa.ForeignKey("flows.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("source_node_id", sa.Integer(), nullable=False),
        sa.Column("target_node_id", sa.Integer(), nullable=False),
        sa.Column("label", sa.String(), nullable=True),
        sa.Column("color", sa.String(), nullable=False, server_default="#00f5ff"),
        sa.Column("animated", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        # Both endpoints must be nodes of the edge's own flow
        sa.ForeignKeyConstraint(
            ["source_node_id", "flow_id"],
            ["timeline_nodes.id", "timeline_nodes.flow_id"],
            ondelete="CASCADE",
            name="fk_timeline_edges_source",
        ),
        sa.ForeignKeyConstraint(
            ["target_node_id", "flow_id"],
            ["timeline_nodes.id", "timeline_nodes.flow_id"],
            ondelete="CASCADE",
            name="fk_timeline_edges_target",
        ),
    )
    op.create_index("ix_timeline_edges_id", "timeline_edges", ["id"])
    op.create_index("ix_timeline_edges_flow_id", "timeline_edges", ["flow_id"])
    op.create_index("ix_timeline_edges_source_node_id", "timeline_edges", ["source_node_id"])
    op.create_index("ix_timeline_edges_target_node_id", "timeline_edges", ["target_node_id"])

    op.create_table(
        "timeline_node_comments",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "node_id",
            sa.Integer(),
            sa.ForeignKey("timeline_nodes.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("author_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_timeline_node_comments_id", "timeline_node_comments", ["id"])
    op.create_index(
        "ix_timeline_node_comments_node_id", "timeline_node_comments", ["node_id"]
    )

    op.create_table(
        "timeline_node_documents",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "node_id",
            sa.Integer(),
            sa.ForeignKey("timeline_nodes.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("file_path", sa.String(), nullable=False, unique=True),
        sa.Column("file_type", sa.String(), nullable=True),
        sa.Column("file_size", sa.BigInteger(), nullable=True),
        sa.Column("uploaded_by", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_timeline_node_documents_id", "timeline_node_documents", ["id"])
    op.create_index(
        "ix_timeline_node_documents_node_id", "timeline_node_documents", ["node_id"]
    )

    op.create_table(
        "timeline_node_links",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "node_id",
            sa.Integer(),
            sa.ForeignKey("timeline_nodes.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("url", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("created_by", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_timeline_node_links_id", "timeline_node_links", ["id"])
    op.create_index("ix_timeline_node_links_node_id", "timeline_node_links", ["node_id"])

    op.create_table(
        "timeline_node_kanban_boards",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "node_id",
            sa.Integer(),
            sa.ForeignKey("timeline_nodes.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(), nullable=True),
    )
    op.create_index(
        "ix_timeline_node_kanban_boards_id", "timeline_node_kanban_boards", ["id"]
    )
    op.create_index(
        "ix_timeline_node_kanban_boards_node_id",
        "timeline_node_kanban_boards",
        ["node_id"],
    )

    op.create_table(
        "timeline_node_kanban_cards",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "board_id",
            sa.Integer(),
            sa.ForeignKey("timeline_node_kanban_boards.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("tags", sa.JSON(), nullable=False),
        sa.Column("progress", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.CheckConstraint(
            "progress >= 0 AND progress <= 100", name="ck_kanban_cards_progress"
        ),
    )
    op.create_index(
        "ix_timeline_node_kanban_cards_id", "timeline_node_kanban_cards", ["id"]
    )
    op.create_index(
        "ix_timeline_node_kanban_cards_board_id",
        "timeline_node_kanban_cards",
        ["board_id"],
    )


def downgrade():
    op.drop_table("timeline_node_kanban_cards")
    op.drop_table("timeline_node_kanban_boards")
    op.drop_table("timeline_node_links")
    op.drop_table("timeline_node_documents")
    op.drop_table("timeline_node_comments")
    op.drop_table("timeline_edges")
    op.drop_table("timeline_nodes")
    op.drop_table("flows")
    op.drop_table("point_history")
    op.drop_table("indications")
    op.drop_table("timeline_items")
    op.drop_table("client_timelines")
    op.drop_table("timeline_template_items")
    op.drop_table("timeline_templates")
    op.drop_table("users")
