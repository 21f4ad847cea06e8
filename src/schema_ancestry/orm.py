"""SQLAlchemy collaborator: read mapper metadata and project ``Select`` statements."""

from __future__ import annotations

import logging
from typing import Any, List

from sqlalchemy import Select, inspect as sa_inspect, select
from sqlalchemy.orm import Mapper, RelationshipDirection, configure_mappers

from .errors import NoNavigationFound
from .graph_builder import EntityNode
from .metadata_loader import RelationshipMetadata, SchemaMetadata, TableMetadata

logger = logging.getLogger(__name__)


def metadata_from_models(base: Any, name: str | None = None) -> SchemaMetadata:
    """Describe every class mapped by a declarative base (or registry).

    Mapped classes are their own type identity. Only many-to-one
    relationships are kept, since those point from the table holding the
    foreign key to its principal. Tables are ordered as they were declared
    on the registry's ``MetaData``.
    """

    registry = getattr(base, "registry", base)
    configure_mappers()

    table_order = list(registry.metadata.tables)
    mappers: List[Mapper] = sorted(
        registry.mappers,
        key=lambda m: (
            table_order.index(m.local_table.fullname)
            if getattr(m.local_table, "fullname", None) in table_order
            else len(table_order),
            m.class_.__name__,
        ),
    )

    schema = SchemaMetadata(name=name or getattr(base, "__name__", "models"))
    for mapper in mappers:
        schema.add_table(_table_from_mapper(mapper))
    logger.debug("Read %d mapped classes from %s", schema.table_count, schema.name)
    return schema


def _table_from_mapper(mapper: Mapper) -> TableMetadata:
    key_columns = list(mapper.primary_key)
    primary_key = [mapper.get_property_by_column(column).key for column in key_columns]

    key_type = None
    if len(key_columns) == 1:
        try:
            key_type = key_columns[0].type.python_type
        except NotImplementedError:
            key_type = None

    relationships = [
        RelationshipMetadata(name=rel.key, target=rel.mapper.class_)
        for rel in mapper.relationships
        if rel.direction is RelationshipDirection.MANYTOONE
    ]

    return TableMetadata(
        identity=mapper.class_,
        name=mapper.class_.__name__,
        primary_key=primary_key,
        relationships=relationships,
        key_type=key_type,
        description=mapper.class_.__doc__,
    )


class SelectProjector:
    """Projects SQLAlchemy 2.x ``Select`` statements along relationships.

    Each hop joins the relationship from the current entity and narrows the
    columns clause to the principal entity; existing criteria are kept and
    nothing is executed.
    """

    def accessor(self, source: EntityNode, navigation: str, target: EntityNode) -> Any:
        """Return the instrumented relationship attribute for ``source.navigation``."""

        mapper = sa_inspect(source.identity, raiseerr=False)
        if mapper is None or navigation not in mapper.relationships:
            raise NoNavigationFound(source.identity, target.identity, navigation)
        if mapper.relationships[navigation].mapper.class_ is not target.identity:
            raise NoNavigationFound(source.identity, target.identity, navigation)
        return getattr(source.identity, navigation)

    def project(self, query: Select, source: EntityNode, navigation: str, target: EntityNode) -> Select:
        self.accessor(source, navigation, target)
        # join from the entity the query selects, which may be an alias of source
        selected = self._selected_entity(query, source)
        return query.join_from(selected, getattr(selected, navigation)).with_only_columns(target.identity)

    def _selected_entity(self, query: Select, source: EntityNode) -> Any:
        descriptions = query.column_descriptions
        entity = descriptions[0].get("entity") if descriptions else None
        info = sa_inspect(entity, raiseerr=False) if entity is not None else None
        if info is None or getattr(info, "mapper", None) is None or info.mapper.class_ is not source.identity:
            raise NoNavigationFound(source.identity, entity)
        return entity

    def base_query(self, node: EntityNode) -> Select:
        return select(node.identity)

    def filter_by_key(self, query: Select, node: EntityNode, key_field: str, value: Any) -> Select:
        return query.where(getattr(node.identity, key_field) == value)
