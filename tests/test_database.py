"""Tests for the SQLAlchemy ledger store and its row mappers."""

from decimal import Decimal

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from tripledger.database.factories import create_database, create_sqlite_database
from tripledger.database.mappers import expense_to_domain, member_to_domain
from tripledger.database.models import Expense as ORMExpense
from tripledger.database.models import Member as ORMMember
from tripledger.domain.entities import MemberRole, SplitDraft, SplitPolicy
from tripledger.domain.errors import StoreError, StoreUnavailable


def add_trip_with_member(db):
    trip_id = db.create_trip(name="Lisbon", currency="EUR")
    member_id = db.add_member(trip_id=trip_id, name="Ana", email="ana@example.com", role=MemberRole.OWNER)
    return trip_id, member_id


def test_schema_round_trip(temp_db):
    trip_id, member_id = add_trip_with_member(temp_db)

    expense_id = temp_db.insert_expense(
        trip_id=trip_id,
        title="Coffee",
        amount=Decimal("3.40"),
        currency="EUR",
        paid_by=member_id,
        split_policy=SplitPolicy.EQUAL,
    )
    temp_db.insert_splits(expense_id, [SplitDraft(member_id=member_id, amount=Decimal("3.40"), paid=True)])

    expense = temp_db.get_expense(expense_id)
    assert expense.amount == Decimal("3.40")
    assert expense.split_policy == SplitPolicy.EQUAL
    assert [(s.member_id, s.amount, s.paid) for s in expense.splits] == [(member_id, Decimal("3.40"), True)]
    assert temp_db.get_member_by_email(trip_id, "ana@example.com").id == member_id


def test_missing_rows_return_none(temp_db):
    assert temp_db.get_trip(1) is None
    assert temp_db.get_member(1) is None
    assert temp_db.get_expense(1) is None
    assert temp_db.get_activity(1) is None


def test_duplicate_email_is_store_error(temp_db):
    trip_id, _ = add_trip_with_member(temp_db)

    with pytest.raises(StoreError):
        temp_db.add_member(trip_id=trip_id, name="Ana again", email="ana@example.com", role=MemberRole.EDITOR)

    # Session is usable again after the rollback
    assert len(temp_db.list_members(trip_id)) == 1


def test_transaction_rolls_back_everything(temp_db):
    with pytest.raises(RuntimeError):
        with temp_db.transaction():
            temp_db.create_trip(name="Lisbon", currency="EUR")
            raise RuntimeError("boom")

    assert temp_db.get_trip(1) is None


def test_nested_transaction_joins_outer(temp_db):
    with temp_db.transaction():
        trip_id = temp_db.create_trip(name="Lisbon", currency="EUR")
        with temp_db.transaction():
            temp_db.add_member(trip_id=trip_id, name="Ana", email="ana@example.com", role=MemberRole.OWNER)

    assert len(temp_db.list_members(trip_id)) == 1


def test_delete_expense_cascades_to_splits(temp_db):
    trip_id, member_id = add_trip_with_member(temp_db)
    expense_id = temp_db.insert_expense(
        trip_id=trip_id,
        title="Coffee",
        amount=Decimal("3.40"),
        currency="EUR",
        paid_by=member_id,
        split_policy=SplitPolicy.EQUAL,
    )
    temp_db.insert_splits(expense_id, [SplitDraft(member_id=member_id, amount=Decimal("3.40"), paid=True)])

    temp_db.delete_expense(expense_id)

    assert temp_db.list_splits(expense_id) == []


def test_operational_error_becomes_store_unavailable(temp_db, monkeypatch):
    class UnreachableSession:
        def query(self, *args, **kwargs):
            raise OperationalError("SELECT 1", {}, Exception("database is locked"))

        def rollback(self):
            pass

        def close(self):
            pass

    monkeypatch.setattr(temp_db, "_session", UnreachableSession())

    with pytest.raises(StoreUnavailable, match="get trip"):
        temp_db.get_trip(1)


def test_other_sqlalchemy_errors_become_store_error(temp_db, monkeypatch):
    class BrokenSession:
        def query(self, *args, **kwargs):
            raise IntegrityError("INSERT", {}, Exception("constraint failed"))

        def rollback(self):
            pass

        def close(self):
            pass

    monkeypatch.setattr(temp_db, "_session", BrokenSession())

    with pytest.raises(StoreError) as exc_info:
        temp_db.list_members(1)
    assert not isinstance(exc_info.value, StoreUnavailable)


class TestMappers:
    """Tests for rejecting malformed rows."""

    def test_unknown_role_rejected(self):
        row = ORMMember(id=1, trip_id=1, name="Ana", email="ana@example.com", role="admin", active=True)

        with pytest.raises(StoreError, match="role"):
            member_to_domain(row)

    def test_missing_amount_rejected(self):
        row = ORMExpense(
            id=5,
            trip_id=1,
            title="Coffee",
            amount=None,
            currency="EUR",
            paid_by=1,
            split_policy="equal",
            is_settlement=False,
            status="purchased",
        )

        with pytest.raises(StoreError, match="amount"):
            expense_to_domain(row, include_splits=False)

    def test_non_numeric_amount_rejected(self):
        row = ORMExpense(
            id=5,
            trip_id=1,
            title="Coffee",
            amount="three",
            currency="EUR",
            paid_by=1,
            split_policy="equal",
            is_settlement=False,
            status="purchased",
        )

        with pytest.raises(StoreError, match="non-numeric"):
            expense_to_domain(row, include_splits=False)


class TestFactories:
    """Tests for choosing the ledger store from configuration."""

    def test_sqlite_path_from_environment(self, tmp_path, monkeypatch):
        monkeypatch.setenv("TRIPLEDGER_DB_PATH", str(tmp_path / "env.db"))

        db = create_sqlite_database()

        assert db.database_url == f"sqlite:///{tmp_path / 'env.db'}"

    def test_url_wins_over_path(self, tmp_path):
        db = create_database(database_url=f"sqlite:///{tmp_path / 'url.db'}", database_path=str(tmp_path / "path.db"))

        assert db.database_url.endswith("url.db")

    def test_url_from_environment(self, tmp_path, monkeypatch):
        monkeypatch.setenv("TRIPLEDGER_DATABASE_URL", f"sqlite:///{tmp_path / 'env-url.db'}")

        db = create_database(database_path=str(tmp_path / "path.db"))

        assert db.database_url.endswith("env-url.db")

    def test_falls_back_to_path(self, tmp_path, monkeypatch):
        monkeypatch.delenv("TRIPLEDGER_DATABASE_URL", raising=False)

        db = create_database(database_path=str(tmp_path / "path.db"))

        assert db.database_url == f"sqlite:///{tmp_path / 'path.db'}"
