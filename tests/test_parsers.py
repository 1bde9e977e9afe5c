"""Tests for amount, share, date and member parsing helpers."""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from tripledger.utils import parse_amount, parse_date, parse_share, resolve_member


@pytest.mark.parametrize(
    "text,expected",
    [
        ("123.45", Decimal("123.45")),
        ("$123.45", Decimal("123.45")),
        ("€1,234.50", Decimal("1234.50")),
        ("EUR 99", Decimal("99")),
        ("12.30 usd", Decimal("12.30")),
        ("-5.00", Decimal("-5.00")),
    ],
)
def test_parse_amount(text, expected):
    assert parse_amount(text) == expected


@pytest.mark.parametrize("text", ["", "   ", "abc", "1.234", "NaN", "Infinity"])
def test_parse_amount_rejects(text):
    with pytest.raises(ValueError):
        parse_amount(text)


def test_parse_share():
    assert parse_share("ana@example.com=120") == ("ana@example.com", Decimal("120"))
    assert parse_share(" 3 = 40% ") == ("3", Decimal("40"))


@pytest.mark.parametrize("text", ["ana@example.com", "=10", "ana@example.com=", "2=ten"])
def test_parse_share_rejects(text):
    with pytest.raises(ValueError):
        parse_share(text)


def test_parse_date_relative_words():
    today = date.today()

    assert parse_date("today") == today
    assert parse_date("Yesterday") == today - timedelta(days=1)
    assert parse_date("tomorrow") == today + timedelta(days=1)


def test_parse_date_absolute():
    assert parse_date("2024-05-01") == date(2024, 5, 1)
    assert parse_date("May 3, 2024") == date(2024, 5, 3)


def test_parse_date_invalid():
    with pytest.raises(ValueError, match="Could not parse date"):
        parse_date("not a date")


class TestResolveMember:
    """Tests for resolving member references."""

    def test_by_id_and_email(self, temp_db, sample_trip):
        trip_id, bruno = sample_trip["trip"].id, sample_trip["bruno"]

        assert resolve_member(temp_db, trip_id, bruno.id) == bruno.id
        assert resolve_member(temp_db, trip_id, str(bruno.id)) == bruno.id
        assert resolve_member(temp_db, trip_id, " Bruno@Example.com ") == bruno.id

    def test_member_of_other_trip(self, temp_db, trip_service, sample_trip):
        _, sam = trip_service.create_trip("Porto", "EUR", "Sam", "sam@example.com")

        with pytest.raises(ValueError, match="not found in trip"):
            resolve_member(temp_db, sample_trip["trip"].id, sam.id)

    def test_unknown_email(self, temp_db, sample_trip):
        with pytest.raises(ValueError, match="nobody@example.com"):
            resolve_member(temp_db, sample_trip["trip"].id, "nobody@example.com")
