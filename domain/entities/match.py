"""Match entities as they leave the ingestion stage."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional


def _first(data: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        value = data.get(key)
        if value is not None:
            return value
    return default


def _to_int(value: Any, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


@dataclass(frozen=True)
class UnitSlot:
    """One champion on a participant's board with its equipped items."""

    unit_id: str
    item_ids: tuple[str, ...] = ()

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> 'UnitSlot':
        items = _first(data, 'itemNames', 'itemIds', 'items', default=[]) or []
        return cls(
            unit_id=str(_first(data, 'character_id', 'unitId', 'name', default='')),
            item_ids=tuple(str(i) for i in items if i not in (None, '')),
        )

    def to_dict(self) -> dict:
        return {'unitId': self.unit_id, 'itemIds': list(self.item_ids)}


@dataclass(frozen=True)
class TraitActivation:
    """A trait and the tier it reached (0 means inactive)."""

    trait_id: str
    tier: int
    unit_count: int

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> 'TraitActivation':
        return cls(
            trait_id=str(_first(data, 'name', 'traitId', default='')),
            tier=_to_int(_first(data, 'style', 'tier_current', 'tier', default=0)),
            unit_count=_to_int(_first(data, 'num_units', 'unitCount', 'numUnits', default=0)),
        )

    def to_dict(self) -> dict:
        return {'traitId': self.trait_id, 'tier': self.tier, 'unitCount': self.unit_count}


@dataclass(frozen=True)
class MatchParticipant:
    """A player's final board and placement (1 best, 8 worst)."""

    placement: int
    units: tuple[UnitSlot, ...] = ()
    traits: tuple[TraitActivation, ...] = ()

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> 'MatchParticipant':
        traits = (TraitActivation.from_api(t) for t in data.get('traits') or [])
        return cls(
            placement=_to_int(data.get('placement'), 8),
            units=tuple(UnitSlot.from_api(u) for u in data.get('units') or []),
            traits=tuple(t for t in traits if t.tier > 0),
        )

    @property
    def is_win(self) -> bool:
        return self.placement == 1

    @property
    def is_top4(self) -> bool:
        return self.placement <= 4

    def to_dict(self) -> dict:
        return {
            'placement': self.placement,
            'units': [u.to_dict() for u in self.units],
            'traits': [t.to_dict() for t in self.traits],
        }


@dataclass(frozen=True)
class RawMatch:
    """Normalized match record. Never mutated after it is built."""

    id: str
    region: str
    participants: tuple[MatchParticipant, ...] = field(default_factory=tuple)

    @classmethod
    def from_api(cls, payload: Mapping[str, Any], region: str) -> Optional['RawMatch']:
        """
        Build a match from a Riot match-v1 payload.

        Accepts both the vendor shape (``metadata.match_id`` plus
        ``info.participants``) and the flat ``{id, participants}`` shape used
        by cached rows. Returns None when no match id can be found.
        """
        metadata = payload.get('metadata') or {}
        info = payload.get('info') or payload
        match_id = _first(metadata, 'match_id') or payload.get('id')
        if not match_id:
            return None
        participants = info.get('participants') or []
        return cls(
            id=str(match_id),
            region=str(payload.get('region') or region),
            participants=tuple(
                MatchParticipant.from_api(p) for p in participants if isinstance(p, Mapping)
            ),
        )

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'region': self.region,
            'participants': [p.to_dict() for p in self.participants],
        }
