"""Errors raised while resolving ancestors across foreign-key relationships."""

from __future__ import annotations

from typing import Any


def _label(identity: Any) -> str:
    return getattr(identity, "__name__", None) or str(identity)


class SchemaAncestryError(Exception):
    """Base class for every failure of a find-parent call."""


class TypeNotMapped(SchemaAncestryError):
    """The type has no table in the schema graph."""

    def __init__(self, identity: Any, role: str = "type"):
        self.identity = identity
        self.role = role
        super().__init__(f"The {role} {_label(identity)!s} is not associated with any table.")


class CompositeKeyUnsupported(SchemaAncestryError):
    """The child table's primary key spans more than one column."""

    def __init__(self, identity: Any, key_fields: tuple[str, ...]):
        self.identity = identity
        self.key_fields = key_fields
        super().__init__(
            f"The child table {_label(identity)} must not have a composite primary key "
            f"(key columns: {', '.join(key_fields) or 'none'})."
        )


class NoRouteFound(SchemaAncestryError):
    """No chain of foreign keys leads from the child to the parent."""

    def __init__(self, start: Any, target: Any):
        self.start = start
        self.target = target
        super().__init__(
            f"No foreign-key route leads from {_label(start)} to {_label(target)}."
        )


class NoNavigationFound(SchemaAncestryError):
    """Two tables are linked by a foreign key but no navigation property realises it."""

    def __init__(self, source: Any, target: Any, navigation: str | None = None):
        self.source = source
        self.target = target
        self.navigation = navigation
        if navigation:
            detail = f"navigation {navigation!r} on {_label(source)} does not lead to {_label(target)}"
        else:
            detail = f"no navigation on {_label(source)} leads to {_label(target)}"
        super().__init__(f"Inconsistent schema model: {detail}.")
