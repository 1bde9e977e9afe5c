"""SQLAlchemy models for tripledger database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    Boolean,
    UniqueConstraint,
    create_engine,
    event,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


class Trip(Base):
    """Trip model."""

    __tablename__ = "trips"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    currency = Column(String(3), nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    members = relationship("Member", back_populates="trip", cascade="all, delete-orphan")
    activities = relationship("Activity", back_populates="trip", cascade="all, delete-orphan")
    expenses = relationship("Expense", back_populates="trip", cascade="all, delete-orphan")


class Member(Base):
    """Trip member model."""

    __tablename__ = "members"

    id = Column(Integer, primary_key=True)
    trip_id = Column(Integer, ForeignKey("trips.id"), nullable=False)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    role = Column(String, nullable=False, default="viewer")
    active = Column(Boolean, default=True, nullable=False)
    joined_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (UniqueConstraint("trip_id", "email", name="uq_trip_member_email"),)

    # Relationships
    trip = relationship("Trip", back_populates="members")


class Activity(Base):
    """Planned itinerary activity model."""

    __tablename__ = "activities"

    id = Column(Integer, primary_key=True)
    trip_id = Column(Integer, ForeignKey("trips.id"), nullable=False)
    title = Column(String, nullable=False)
    description = Column(String, nullable=True)
    estimated_cost = Column(Numeric(12, 2), nullable=False, default=0)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    trip = relationship("Trip", back_populates="activities")


class Expense(Base):
    """Expense model. Settlements are expenses with is_settlement set."""

    __tablename__ = "expenses"

    id = Column(Integer, primary_key=True)
    trip_id = Column(Integer, ForeignKey("trips.id"), nullable=False)
    title = Column(String, nullable=False)
    description = Column(String, nullable=True)
    amount = Column(Numeric(12, 2), nullable=False)
    currency = Column(String(3), nullable=False)
    paid_by = Column(Integer, ForeignKey("members.id"), nullable=False)
    split_policy = Column(String, nullable=False, default="equal")
    is_settlement = Column(Boolean, default=False, nullable=False)
    status = Column(String, nullable=False, default="purchased")
    category = Column(String, nullable=True)
    purchase_date = Column(Date, nullable=True)
    activity_id = Column(Integer, ForeignKey("activities.id"), nullable=True)
    created_by = Column(Integer, ForeignKey("members.id"), nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    trip = relationship("Trip", back_populates="expenses")
    splits = relationship(
        "ExpenseSplit",
        back_populates="expense",
        cascade="all, delete-orphan",
        order_by="ExpenseSplit.id",
    )


class ExpenseSplit(Base):
    """One member's share of an expense."""

    __tablename__ = "expense_splits"

    id = Column(Integer, primary_key=True)
    expense_id = Column(Integer, ForeignKey("expenses.id"), nullable=False)
    member_id = Column(Integer, ForeignKey("members.id"), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    paid = Column(Boolean, default=False, nullable=False)

    __table_args__ = (UniqueConstraint("expense_id", "member_id", name="uq_expense_member"),)

    # Relationships
    expense = relationship("Expense", back_populates="splits")


def _enable_sqlite_foreign_keys(engine: Engine) -> None:
    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory.

    SQLite engines get foreign key enforcement; other backends run every
    transaction at SERIALIZABLE isolation.
    """
    if database_url.startswith("sqlite"):
        engine = create_engine(database_url, echo=False)
        _enable_sqlite_foreign_keys(engine)
    else:
        engine = create_engine(database_url, echo=False, isolation_level="SERIALIZABLE")
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
