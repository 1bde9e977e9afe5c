"""Utility functions for tripledger."""

from tripledger.utils.date_parser import parse_date
from tripledger.utils.amount_parser import parse_amount, parse_share
from tripledger.utils.member_resolver import resolve_member

__all__ = ["parse_date", "parse_amount", "parse_share", "resolve_member"]
