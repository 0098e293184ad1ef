"""Utility for resolving free-text person names to directory identities."""

from typing import Iterable, Optional

from fleetledger.domain.entities import Identity, IdentityResolution, ResolutionOutcome
from fleetledger.utils.name_normalizer import normalize_name


def name_matches(normalized_name: str, identity: Identity) -> bool:
    """Bidirectional containment test between two normalized names.

    "juan perez" matches "juan perez garcia" and vice versa. Empty names never
    match anything.
    """
    if not normalized_name or not identity.normalized_name:
        return False
    return normalized_name in identity.normalized_name or identity.normalized_name in normalized_name


def resolve_identity(raw_name: Optional[str], directory: Iterable[Identity]) -> IdentityResolution:
    """Resolve a free-text name against the identity directory.

    Args:
        raw_name: Name as stored on the record
        directory: Known identities

    Returns:
        IdentityResolution with outcome UNIQUE (one candidate), AMBIGUOUS
        (several candidates, never narrowed down) or NONE
    """
    normalized = normalize_name(raw_name)
    candidates = tuple(identity for identity in directory if name_matches(normalized, identity))

    if not candidates:
        return IdentityResolution(outcome=ResolutionOutcome.NONE)
    if len(candidates) == 1:
        return IdentityResolution(outcome=ResolutionOutcome.UNIQUE, candidates=candidates)
    return IdentityResolution(outcome=ResolutionOutcome.AMBIGUOUS, candidates=candidates)


class IdentityDirectory:
    """Identities loaded once for a run, indexed by id."""

    def __init__(self, identities: Iterable[Identity]):
        self.identities = tuple(identities)
        self.by_id = {identity.id: identity for identity in self.identities}

    def __len__(self) -> int:
        return len(self.identities)

    def __iter__(self):
        return iter(self.identities)

    def get(self, identity_id: Optional[str]) -> Optional[Identity]:
        if not identity_id:
            return None
        return self.by_id.get(identity_id)

    def resolve(self, raw_name: Optional[str]) -> IdentityResolution:
        return resolve_identity(raw_name, self.identities)
