"""Registry of every report the library can fetch, keyed by name."""

from typing import Dict, List

from ..data.models import ObjectTypeSpec
from . import cloud, core, databases, hosts, snapshots, virtualization

CATALOG: Dict[str, ObjectTypeSpec] = {}
for _module in (core, virtualization, databases, hosts, cloud, snapshots):
    for _spec in _module.SPECS:
        if _spec.name in CATALOG:
            raise ValueError(f"Duplicate object type: {_spec.name}")
        CATALOG[_spec.name] = _spec


def get_spec(name: str) -> ObjectTypeSpec:
    """Look up an object type; dashes and case are ignored."""
    key = name.strip().lower().replace("-", "_")
    try:
        return CATALOG[key]
    except KeyError:
        raise KeyError(f"Unknown object type '{name}'. Known: {', '.join(sorted(CATALOG))}") from None


def list_specs() -> List[ObjectTypeSpec]:
    return [CATALOG[name] for name in sorted(CATALOG)]


__all__ = ["CATALOG", "get_spec", "list_specs"]
