"""Load table and relationship metadata from schema description files."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

_KEY_TYPES = {
    "int": int,
    "integer": int,
    "str": str,
    "string": str,
    "uuid": str,
    "float": float,
}


@dataclass(frozen=True)
class RelationshipMetadata:
    """A many-to-one navigation from the table holding the foreign key to its principal."""

    name: str
    target: Any


@dataclass
class TableMetadata:
    """One mapped table/type as described by the metadata collaborator."""

    identity: Any
    name: str
    primary_key: List[str] = field(default_factory=list)
    relationships: List[RelationshipMetadata] = field(default_factory=list)
    key_type: Optional[type] = None
    description: Optional[str] = None


@dataclass
class SchemaMetadata:
    """Every table of one schema, keyed by type identity in declaration order."""

    name: str
    tables: Dict[Any, TableMetadata] = field(default_factory=dict)
    resource_path: Optional[Path] = None

    @property
    def table_count(self) -> int:
        return len(self.tables)

    @property
    def relationship_count(self) -> int:
        return sum(len(table.relationships) for table in self.tables.values())

    def add_table(self, table: TableMetadata) -> None:
        if table.identity in self.tables:
            raise ValueError(f"Table '{table.name}' is declared twice in schema '{self.name}'")
        self.tables[table.identity] = table


def load_schema_metadata(schema_path: Path) -> SchemaMetadata:
    """Load a schema description file.

    The file holds a single JSON object::

        {
          "name": "garage",
          "tables": [
            {"name": "Car", "primary_key": ["id"], "key_type": "int",
             "relationships": [{"name": "garage", "target": "Garage"}]}
          ]
        }

    Table names double as type identities.
    """

    if not schema_path.exists():
        raise FileNotFoundError(f"Schema file not found: {schema_path}")

    try:
        with schema_path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Failed to parse JSON at {schema_path}") from exc

    if not isinstance(data, dict) or not isinstance(data.get("tables"), list):
        raise ValueError(f"Schema file {schema_path} must contain an object with a 'tables' list")

    schema = SchemaMetadata(name=data.get("name") or schema_path.stem, resource_path=schema_path)
    for entry in data["tables"]:
        schema.add_table(_parse_table(entry, schema_path))
    return schema


def _is_name(value: Any) -> bool:
    return isinstance(value, str) and bool(value)


def _parse_table(entry: Dict[str, Any], schema_path: Path) -> TableMetadata:
    """Parse one entry of the 'tables' list."""

    name = entry.get("name") if isinstance(entry, dict) else None
    if not _is_name(name):
        raise ValueError(f"Every table in {schema_path} needs a string 'name'")

    primary_key = entry.get("primary_key") or []
    if isinstance(primary_key, str):
        primary_key = [primary_key]
    if not isinstance(primary_key, list) or not all(isinstance(col, str) for col in primary_key):
        raise ValueError(f"primary_key on table '{name}' must be a column name or a list of them")

    rel_entries = entry.get("relationships") or []
    if not isinstance(rel_entries, list):
        raise ValueError(f"relationships on table '{name}' must be a list")

    relationships = []
    for rel in rel_entries:
        if not isinstance(rel, dict) or not _is_name(rel.get("name")) or not _is_name(rel.get("target")):
            raise ValueError(f"Relationship on table '{name}' needs 'name' and 'target'")
        relationships.append(RelationshipMetadata(name=rel["name"], target=rel["target"]))

    key_type_name = entry.get("key_type") or ""
    if not isinstance(key_type_name, str):
        raise ValueError(f"key_type on table '{name}' must be a string")
    key_type_name = key_type_name.lower()
    if key_type_name and key_type_name not in _KEY_TYPES:
        raise ValueError(f"Unknown key_type '{key_type_name}' on table '{name}'")

    return TableMetadata(
        identity=name,
        name=name,
        primary_key=list(primary_key),
        relationships=relationships,
        key_type=_KEY_TYPES.get(key_type_name),
        description=entry.get("description"),
    )
