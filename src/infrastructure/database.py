"""
Database Module

SQLAlchemy engine, session factory and table models for the attendance
store. One row per worker, schedule slot, clock event, incident, holiday,
company closure and system configuration key.
"""

from pathlib import Path
from typing import Optional

from sqlalchemy import (
    Column, Date, DateTime, Enum, ForeignKey, Integer, String, Text,
    UniqueConstraint, create_engine
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker
from sqlalchemy.pool import StaticPool

from domain.entities import ClockMethod, Direction, IncidentKind, IncidentStatus

# Base class for models
Base = declarative_base()


class WorkerRow(Base):
    """Worker identity and kiosk identifiers."""
    __tablename__ = "workers"

    id = Column(String(64), primary_key=True)
    name = Column(String(200), nullable=False)
    email = Column(String(200), nullable=True)
    pin = Column(String(32), unique=True, nullable=True)
    nfc_tag_id = Column(String(128), unique=True, nullable=True)
    qr_token = Column(String(128), unique=True, nullable=True)
    created_at = Column(DateTime, nullable=False)

    schedules = relationship(
        "ScheduleRow",
        back_populates="worker",
        cascade="all, delete-orphan",
        order_by="ScheduleRow.day_of_week",
    )


class ScheduleRow(Base):
    """Expected slots of one owner for one day of the week (NULL owner = global template)."""
    __tablename__ = "schedules"

    id = Column(Integer, primary_key=True)
    worker_id = Column(String(64), ForeignKey("workers.id"), nullable=True, index=True)
    day_of_week = Column(Integer, nullable=False)  # 0=Sunday .. 6=Saturday

    worker = relationship("WorkerRow", back_populates="schedules")
    slots = relationship(
        "SlotRow",
        back_populates="schedule",
        cascade="all, delete-orphan",
        order_by="SlotRow.position",
    )

    __table_args__ = (
        UniqueConstraint("worker_id", "day_of_week", name="uq_schedule_worker_day"),
    )


class SlotRow(Base):
    """A single "HH:MM" interval of a schedule."""
    __tablename__ = "schedule_slots"

    id = Column(Integer, primary_key=True)
    schedule_id = Column(Integer, ForeignKey("schedules.id"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    start_time = Column(String(5), nullable=False)
    end_time = Column(String(5), nullable=False)

    schedule = relationship("ScheduleRow", back_populates="slots")


class ClockEventRow(Base):
    """Append-only clock-in/clock-out fact."""
    __tablename__ = "clock_events"

    id = Column(Integer, primary_key=True)
    worker_id = Column(String(64), ForeignKey("workers.id"), nullable=False, index=True)
    direction = Column(Enum(Direction), nullable=False)
    method = Column(Enum(ClockMethod), nullable=False)
    timestamp = Column(DateTime, nullable=False, index=True)
    location = Column(String(200), nullable=True)
    photo_url = Column(String(500), nullable=True)


class IncidentRow(Base):
    """Leave/absence record; kind is stored once, never re-derived on read."""
    __tablename__ = "incidents"

    id = Column(String(32), primary_key=True)
    worker_id = Column(String(64), nullable=False, index=True)
    type = Column(String(100), nullable=False)
    kind = Column(Enum(IncidentKind), nullable=False)
    start_date = Column(Date, nullable=False, index=True)
    end_date = Column(Date, nullable=True)
    status = Column(Enum(IncidentStatus), nullable=False, default=IncidentStatus.PENDING)
    description = Column(Text, nullable=True)


class HolidayRow(Base):
    __tablename__ = "holidays"

    id = Column(Integer, primary_key=True)
    date = Column(Date, nullable=False, index=True)
    name = Column(String(200), nullable=False)


class ClosureRow(Base):
    __tablename__ = "company_closures"

    id = Column(Integer, primary_key=True)
    start_date = Column(Date, nullable=False, index=True)
    end_date = Column(Date, nullable=False)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)


class SystemConfigRow(Base):
    """Key/value settings such as PILOT_START_DATE."""
    __tablename__ = "system_config"

    key = Column(String(100), primary_key=True)
    value = Column(String(500), nullable=False)


def database_url(data_path: Optional[Path]) -> str:
    """SQLite URL for a data file, or an in-memory database when no path is given."""
    if data_path is None:
        return "sqlite://"
    return f"sqlite:///{Path(data_path)}"


def init_database(data_path: Optional[Path] = None) -> sessionmaker:
    """
    Create the engine, the tables that are missing and a session factory.

    The in-memory database shares one connection so every session sees
    the same tables.
    """
    if data_path is None:
        engine = create_engine(
            database_url(None),
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=False,
        )
    else:
        Path(data_path).parent.mkdir(parents=True, exist_ok=True)
        engine = create_engine(database_url(data_path), echo=False)

    Base.metadata.create_all(engine)

    # Session factory
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)
