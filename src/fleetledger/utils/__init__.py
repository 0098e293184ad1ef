"""Utility functions for fleetledger."""

from fleetledger.utils.name_normalizer import normalize_name
from fleetledger.utils.identity_resolver import IdentityDirectory, resolve_identity
from fleetledger.utils.amount_parser import finite_amount
from fleetledger.utils.date_parser import parse_date

__all__ = ["normalize_name", "IdentityDirectory", "resolve_identity", "finite_amount", "parse_date"]
