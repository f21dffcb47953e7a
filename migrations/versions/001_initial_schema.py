"""Initial schema with PostGIS extension: users, tigers, sightings.

Revision ID: 001
Create Date: 2026-10-18
"""

from alembic import op
import sqlalchemy as sa
from geoalchemy2 import Geometry


revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Enable PostGIS extension
    op.execute("CREATE EXTENSION IF NOT EXISTS postgis")

    # ── users ─────────────────────────────────────────────────────────
    op.create_table(
        "users",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("username", sa.String(120), unique=True, nullable=False),
        sa.Column("email", sa.String(255), unique=True, nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    )

    # ── tigers ────────────────────────────────────────────────────────
    op.create_table(
        "tigers",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("date_of_birth", sa.Date, nullable=True),
        sa.Column("last_seen_timestamp", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_seen_lat", sa.Float, nullable=True),
        sa.Column("last_seen_lon", sa.Float, nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    )

    # ── sightings ─────────────────────────────────────────────────────
    op.create_table(
        "sightings",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "user_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False
        ),
        sa.Column(
            "tiger_id", sa.Integer, sa.ForeignKey("tigers.id"), nullable=False
        ),
        sa.Column("location", Geometry("POINT", srid=4326), nullable=False),
        sa.Column("lat", sa.Float, nullable=False),
        sa.Column("lon", sa.Float, nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.Column("image_path", sa.String(512), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    )
    op.create_index(
        "idx_sightings_location",
        "sightings",
        ["location"],
        postgresql_using="gist",
    )
    op.create_index(
        "idx_sightings_tiger_ts", "sightings", ["tiger_id", "timestamp"]
    )
    op.create_index("idx_sightings_user", "sightings", ["user_id"])


def downgrade() -> None:
    op.drop_table("sightings")
    op.drop_table("tigers")
    op.drop_table("users")
