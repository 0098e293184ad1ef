"""Tests for resolving free-text names against the user directory."""

from fleetledger.domain.entities import ResolutionOutcome
from fleetledger.utils.identity_resolver import IdentityDirectory, resolve_identity


def test_partial_name_matches_longer_directory_name(identity_factory):
    """A record name contained in the directory name is a unique match."""
    juan = identity_factory("t1", "Juan Perez Garcia", commission_rate=10)

    resolution = resolve_identity("Juan Perez", [juan])

    assert resolution.outcome is ResolutionOutcome.UNIQUE
    assert resolution.identity == juan


def test_longer_record_name_matches_shorter_directory_name(identity_factory):
    """Containment works in both directions."""
    juan = identity_factory("t1", "Juan Perez")

    resolution = resolve_identity("JUAN PÉREZ GARCÍA", [juan])

    assert resolution.outcome is ResolutionOutcome.UNIQUE
    assert resolution.identity.id == "t1"


def test_short_name_matching_several_identities_is_ambiguous(directory):
    resolution = resolve_identity("Ana", directory)

    assert resolution.outcome is ResolutionOutcome.AMBIGUOUS
    assert resolution.identity is None
    assert {identity.id for identity in resolution.candidates} == {"u1", "u2"}


def test_no_match(directory):
    resolution = resolve_identity("Roberto Salas", directory)

    assert resolution.outcome is ResolutionOutcome.NONE
    assert resolution.candidates == ()


def test_empty_name_never_matches(directory, identity_factory):
    nameless = identity_factory("u9", "")

    assert resolve_identity("", directory).outcome is ResolutionOutcome.NONE
    assert resolve_identity(None, directory).outcome is ResolutionOutcome.NONE
    assert resolve_identity("Ana Torres", [nameless]).outcome is ResolutionOutcome.NONE


def test_accents_and_case_are_ignored(directory):
    resolution = resolve_identity("jose perez", directory)

    assert resolution.outcome is ResolutionOutcome.UNIQUE
    assert resolution.identity.id == "u3"


def test_directory_lookup_by_id(directory):
    index = IdentityDirectory(directory)

    assert len(index) == 4
    assert index.get("u3").display_name == "José Pérez"
    assert index.get("missing") is None
    assert index.get(None) is None
    assert index.resolve("Luis").identity.id == "u4"
