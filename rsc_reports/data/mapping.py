"""Declarative node → flat record mapping.

Each object type declares a tuple of :class:`Field` entries. ``flatten``
walks them in order and builds one record per raw GraphQL node. Missing
nested paths yield ``None`` (or the field default), never an exception.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, Optional, Sequence

from .normalization import (
    build_object_url,
    bytes_to_gb,
    bytes_to_tb,
    days_since,
    get_path,
    has_value,
    hours_since,
    protection_label,
    to_utc,
    utc_now,
)


@dataclass(frozen=True)
class MappingContext:
    """Per-pass mapping inputs.

    ``now`` is fixed for the whole pass, so every age field in one
    collection is measured against the same instant.
    """

    now: datetime
    console_url: Optional[str] = None

    @classmethod
    def create(cls, now: Optional[datetime] = None, console_url: Optional[str] = None) -> "MappingContext":
        return cls(now=to_utc(now) or utc_now(), console_url=console_url)


@dataclass(frozen=True)
class Field:
    """One output column.

    Exactly one of ``path`` / ``derive`` is normally set. ``convert`` runs on
    the extracted value; ``default`` replaces a None result.
    """

    name: str
    path: Optional[str] = None
    convert: Optional[Callable[[Any], Any]] = None
    default: Any = None
    derive: Optional[Callable[[Dict[str, Any], MappingContext], Any]] = None

    def extract(self, node: Dict[str, Any], ctx: MappingContext) -> Any:
        if self.derive is not None:
            value = self.derive(node, ctx)
        elif self.path is not None:
            value = get_path(node, self.path)
        else:
            value = None
        if value is not None and self.convert is not None:
            value = self.convert(value)
        return self.default if value is None else value


def flatten(node: Dict[str, Any], fields: Sequence[Field], ctx: MappingContext) -> Dict[str, Any]:
    """Build one flat record from a raw node."""
    return {f.name: f.extract(node or {}, ctx) for f in fields}


def flatten_all(nodes: Iterable[Dict[str, Any]], fields: Sequence[Field], ctx: MappingContext):
    return [flatten(node, fields, ctx) for node in nodes]


# --- Field factories ----------------------------------------------------------


def utc_field(name: str, path: str) -> Field:
    """Timestamp (epoch ms or ISO) → aware UTC datetime."""
    return Field(name, path, convert=to_utc)


def hours_since_field(name: str, path: str) -> Field:
    return Field(name, derive=lambda node, ctx: hours_since(get_path(node, path), ctx.now))


def days_since_field(name: str, path: str) -> Field:
    return Field(name, derive=lambda node, ctx: days_since(get_path(node, path), ctx.now))


def gb_field(name: str, path: str) -> Field:
    return Field(name, path, convert=bytes_to_gb)


def tb_field(name: str, path: str) -> Field:
    return Field(name, path, convert=bytes_to_tb)


def flag_field(name: str, path: str) -> Field:
    """True when the sub-object/string at ``path`` is present and non-empty."""
    return Field(name, derive=lambda node, ctx: has_value(get_path(node, path)))


def equals_field(name: str, path: str, expected: Any) -> Field:
    """True when the value at ``path`` equals ``expected``."""
    return Field(name, derive=lambda node, ctx: get_path(node, path) == expected)


def bool_field(name: str, path: str) -> Field:
    """Boolean at ``path``; a missing value is False."""
    return Field(name, derive=lambda node, ctx: bool(get_path(node, path)))


def count_field(name: str, path: str) -> Field:
    """Length of the list at ``path``, or None when the list is absent."""

    def _count(node, ctx):
        value = get_path(node, path)
        return len(value) if isinstance(value, (list, tuple)) else None

    return Field(name, derive=_count)


def joined_field(name: str, path: str, key: Optional[str] = None, sep: str = ", ") -> Field:
    """Join a list (optionally of dicts, by ``key``) into one string."""

    def _join(node, ctx):
        value = get_path(node, path)
        if not isinstance(value, (list, tuple)):
            return value
        items = [get_path(item, key) if key else item for item in value]
        return sep.join(str(item) for item in items if item is not None)

    return Field(name, derive=_join)


def constant_field(name: str, value: Any) -> Field:
    return Field(name, derive=lambda node, ctx: value)


def protection_field(name: str, sla_id_path: str) -> Field:
    return Field(name, derive=lambda node, ctx: protection_label(get_path(node, sla_id_path)))


def url_field(name: str, object_type: Optional[str] = None, id_path: str = "id", type_path: Optional[str] = None) -> Field:
    """Console deep link built from the object type and id.

    ``object_type`` fixes the type; ``type_path`` reads it from the node.
    """

    def _url(node, ctx):
        kind = get_path(node, type_path) if type_path else object_type
        return build_object_url(ctx.console_url, kind, get_path(node, id_path))

    return Field(name, derive=_url)
