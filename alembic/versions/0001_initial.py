from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def _audit_columns():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("created_by", sa.String(), nullable=True),
        sa.Column("updated_by", sa.String(), nullable=True),
    ]


def _approval_columns():
    return [
        sa.Column("agent_id", sa.String(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("agency_id", sa.String(), sa.ForeignKey("agencies.id"), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="PENDING"),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        sa.Column("status_changed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("reviewed_by", sa.String(), nullable=True),
    ]


def upgrade():
    op.create_table(
        "agencies",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=True),
        sa.Column("phone", sa.String(length=40), nullable=True),
        sa.Column("address", sa.String(length=300), nullable=True),
        sa.Column("logo_url", sa.String(length=1000), nullable=True),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_audit_columns(),
    )

    op.create_table(
        "users",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("external_id", sa.String(length=200), nullable=False, unique=True),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("first_name", sa.String(length=120), nullable=True),
        sa.Column("last_name", sa.String(length=120), nullable=True),
        sa.Column("phone", sa.String(length=40), nullable=True),
        sa.Column("role", sa.String(length=30), nullable=False),
        sa.Column("agency_id", sa.String(), sa.ForeignKey("agencies.id"), nullable=True),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_audit_columns(),
    )
    op.create_index("ix_users_agency_id", "users", ["agency_id"])

    op.create_table(
        "api_keys",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("user_id", sa.String(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("key_prefix", sa.String(length=16), nullable=False),
        sa.Column("key_hash", sa.Text(), nullable=False, unique=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("rotated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_api_keys_user_id", "api_keys", ["user_id"])
    op.create_index("ix_api_keys_key_prefix", "api_keys", ["key_prefix"])

    op.create_table(
        "properties",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("title", sa.String(length=100), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("type", sa.String(length=30), nullable=False),
        sa.Column("transaction_type", sa.String(length=30), nullable=False),
        sa.Column("address", sa.String(length=300), nullable=False),
        sa.Column("location_state", sa.String(length=120), nullable=False, server_default=""),
        sa.Column("location_city", sa.String(length=120), nullable=False, server_default=""),
        sa.Column("location_neigh", sa.String(length=120), nullable=True),
        sa.Column("municipality", sa.String(length=120), nullable=True),
        sa.Column("latitude", sa.Float(), nullable=True),
        sa.Column("longitude", sa.Float(), nullable=True),
        sa.Column("google_maps_url", sa.String(length=1000), nullable=True),
        sa.Column("price", sa.Float(), nullable=False),
        sa.Column("currency", sa.String(length=20), nullable=False, server_default="DOLLARS"),
        sa.Column("bedrooms", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("bathrooms", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("garage_spaces", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("square_meters", sa.Float(), nullable=False),
        sa.Column("images", postgresql.ARRAY(sa.String()), nullable=False, server_default="{}"),
        sa.Column("videos", postgresql.ARRAY(sa.String()), nullable=False, server_default="{}"),
        sa.Column("features", postgresql.ARRAY(sa.String()), nullable=False, server_default="{}"),
        *_approval_columns(),
        *_audit_columns(),
    )
    op.create_index("ix_properties_agent_id", "properties", ["agent_id"])
    op.create_index("ix_properties_agency_id", "properties", ["agency_id"])
    op.create_index("ix_properties_status", "properties", ["status"])
    op.create_index("ix_properties_status_created_at", "properties", ["status", "created_at"])

    op.create_table(
        "projects",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("location", sa.String(length=200), nullable=False),
        sa.Column("images", postgresql.ARRAY(sa.String()), nullable=False, server_default="{}"),
        sa.Column("brochure_url", sa.String(length=1000), nullable=True),
        sa.Column("google_maps_url", sa.String(length=1000), nullable=True),
        sa.Column("latitude", sa.Float(), nullable=True),
        sa.Column("longitude", sa.Float(), nullable=True),
        *_approval_columns(),
        *_audit_columns(),
    )
    op.create_index("ix_projects_agent_id", "projects", ["agent_id"])
    op.create_index("ix_projects_agency_id", "projects", ["agency_id"])
    op.create_index("ix_projects_status", "projects", ["status"])

    op.create_table(
        "floors",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("project_id", sa.String(), sa.ForeignKey("projects.id", ondelete="CASCADE"), nullable=False),
        sa.Column("number", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=50), nullable=True),
        *_audit_columns(),
        sa.UniqueConstraint("project_id", "number", name="uq_floor_number_per_project"),
    )
    op.create_index("ix_floors_project_id", "floors", ["project_id"])

    op.create_table(
        "quadrants",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("floor_id", sa.String(), sa.ForeignKey("floors.id", ondelete="CASCADE"), nullable=False),
        sa.Column("custom_id", sa.String(length=50), nullable=False),
        sa.Column("type", sa.String(length=30), nullable=False, server_default="DEPARTAMENTO"),
        sa.Column("area", sa.Float(), nullable=False),
        sa.Column("bedrooms", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("bathrooms", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("price", sa.Float(), nullable=False),
        sa.Column("currency", sa.String(length=20), nullable=False),
        sa.Column("exchange_rate", sa.Float(), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="AVAILABLE"),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_audit_columns(),
    )
    op.create_index("ix_quadrants_floor_id", "quadrants", ["floor_id"])

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("agency_id", sa.String(), nullable=True),
        sa.Column("actor_user_id", sa.String(), nullable=True),
        sa.Column("action", sa.String(length=120), nullable=False),
        sa.Column("target_type", sa.String(length=120), nullable=True),
        sa.Column("target_id", sa.String(length=200), nullable=True),
        sa.Column("detail", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_audit_logs_agency_created", "audit_logs", ["agency_id", "created_at"])


def downgrade():
    op.drop_index("ix_audit_logs_agency_created", table_name="audit_logs")
    op.drop_table("audit_logs")
    op.drop_index("ix_quadrants_floor_id", table_name="quadrants")
    op.drop_table("quadrants")
    op.drop_index("ix_floors_project_id", table_name="floors")
    op.drop_table("floors")
    for ix in ("ix_projects_status", "ix_projects_agency_id", "ix_projects_agent_id"):
        op.drop_index(ix, table_name="projects")
    op.drop_table("projects")
    for ix in (
        "ix_properties_status_created_at",
        "ix_properties_status",
        "ix_properties_agency_id",
        "ix_properties_agent_id",
    ):
        op.drop_index(ix, table_name="properties")
    op.drop_table("properties")
    op.drop_index("ix_api_keys_key_prefix", table_name="api_keys")
    op.drop_index("ix_api_keys_user_id", table_name="api_keys")
    op.drop_table("api_keys")
    op.drop_index("ix_users_agency_id", table_name="users")
    op.drop_table("users")
    op.drop_table("agencies")
