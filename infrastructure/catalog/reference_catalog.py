"""Read-only lookup of unit, item and trait metadata."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Literal, Mapping, Optional

logger = logging.getLogger(__name__)

EntityKind = Literal["unit", "item", "trait"]

DEFAULT_ICON = "default.png"


def icon_path(icon: Optional[str], kind: EntityKind) -> str:
    return f"/assets/{kind}s/{icon or DEFAULT_ICON}"


class ReferenceCatalog:
    """
    Static set data keyed by API id (``TFT9_Ahri``, ``TFT_Item_Deathblade``...).

    Files follow the mapping layout of the community data dumps:
      units.json  -> {"units": {id: {name, icon, cost, traits}}}
      items.json  -> {"items": {id: {name, icon, category}}}
      traits.json -> {"origins": {...}, "classes": {...}}
    Unknown ids resolve to the id itself with a default icon and zero cost.
    """

    def __init__(
        self,
        units: Optional[Mapping[str, Mapping[str, Any]]] = None,
        items: Optional[Mapping[str, Mapping[str, Any]]] = None,
        traits: Optional[Mapping[str, Mapping[str, Any]]] = None,
    ) -> None:
        self._tables: Dict[str, Mapping[str, Mapping[str, Any]]] = {
            "unit": MappingProxyType(dict(units or {})),
            "item": MappingProxyType(dict(items or {})),
            "trait": MappingProxyType(dict(traits or {})),
        }

    @classmethod
    def empty(cls) -> "ReferenceCatalog":
        return cls()

    @classmethod
    def from_directory(cls, directory: Path) -> "ReferenceCatalog":
        units = _load(directory / "units.json").get("units", {})
        items = _load(directory / "items.json").get("items", {})
        trait_doc = _load(directory / "traits.json")
        traits = {**trait_doc.get("origins", {}), **trait_doc.get("classes", {})}
        logger.info(f"catalog loaded: {len(units)} units, {len(items)} items, {len(traits)} traits")
        return cls(units=units, items=items, traits=traits)

    def _entry(self, kind: EntityKind, entity_id: str) -> Mapping[str, Any]:
        return self._tables[kind].get(entity_id) or {}

    def display_name(self, entity_id: str, kind: EntityKind) -> str:
        return str(self._entry(kind, entity_id).get("name") or entity_id)

    def icon(self, entity_id: str, kind: EntityKind) -> str:
        return icon_path(self._entry(kind, entity_id).get("icon"), kind)

    def unit_cost(self, unit_id: str) -> int:
        try:
            return int(self._entry("unit", unit_id).get("cost") or 0)
        except (TypeError, ValueError):
            return 0

    def item_category(self, item_id: str) -> Optional[str]:
        category = self._entry("item", item_id).get("category")
        return str(category) if category is not None else None

    def size(self, kind: EntityKind) -> int:
        return len(self._tables[kind])


def _load(path: Path) -> Dict[str, Any]:
    if not path.exists():
        logger.warning(f"catalog file missing: {path}")
        return {}
    with path.open(encoding="utf-8") as fh:
        data = json.load(fh)
    return data if isinstance(data, dict) else {}
