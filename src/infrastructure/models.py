"""
SQLAlchemy ORM models  (maps to PostgreSQL + PostGIS).

Tables
------
* ``users``      -- registered observers (managed by the account service)
* ``tigers``     -- tracked animals, with denormalised last-seen position
* ``sightings``  -- one row per accepted sighting report

Indexes
-------
* **GIST** on ``sightings.location`` for spatial queries.
* **B-Tree** on ``(tiger_id, timestamp)`` for the last-sighting and
  listing look-ups, and on ``user_id`` for the observer fan-out query.
"""

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    func,
)
from geoalchemy2 import Geometry

from .database import Base


class UserModel(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(120), unique=True, nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class TigerModel(Base):
    __tablename__ = "tigers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(120), nullable=False)
    date_of_birth = Column(Date, nullable=True)

    # Projection of the most recent accepted sighting
    last_seen_timestamp = Column(DateTime(timezone=True), nullable=True)
    last_seen_lat = Column(Float, nullable=True)
    last_seen_lon = Column(Float, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())


class SightingModel(Base):
    __tablename__ = "sightings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    tiger_id = Column(Integer, ForeignKey("tigers.id"), nullable=False)

    # Stored as PostGIS geometry for spatial indexing
    location = Column(Geometry("POINT", srid=4326), nullable=False)

    # Also stored as plain floats for fast reads (avoids ST_X / ST_Y)
    lat = Column(Float, nullable=False)
    lon = Column(Float, nullable=False)

    timestamp = Column(DateTime(timezone=True), nullable=False)
    image_path = Column(String(512), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index("idx_sightings_location", "location", postgresql_using="gist"),
        Index("idx_sightings_tiger_ts", "tiger_id", "timestamp"),
        Index("idx_sightings_user", "user_id"),
    )
