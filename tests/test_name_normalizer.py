"""Tests for person name normalization."""

import pytest

from fleetledger.utils.name_normalizer import normalize_name


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("  José   PÉREZ ", "jose perez"),
        ("Muñoz\tGarcía\nLópez", "munoz garcia lopez"),
        ("ANA TORRES", "ana torres"),
        ("", ""),
        ("   ", ""),
    ],
)
def test_normalize_name(raw, expected):
    assert normalize_name(raw) == expected


def test_normalize_name_is_idempotent():
    once = normalize_name("  Ñandú  Ávila ")
    assert normalize_name(once) == once


def test_normalize_name_non_string_is_empty():
    assert normalize_name(None) == ""
    assert normalize_name(42) == ""
