"""Schema-tagged entities and the data storage elements that carry them."""

from __future__ import annotations

from typing import Mapping
from uuid import UUID

from core.errors import HostDocumentError
from host.schema import FieldSpec, Schema


class Entity:
    """Field values for one schema, attached to an element."""

    def __init__(self, schema: Schema, values: Mapping[str, object] | None = None) -> None:
        self._schema = schema
        self._values: dict[str, object] = {}
        for field_name, value in (values or {}).items():
            self.set(field_name, value)

    @property
    def schema(self) -> Schema:
        return self._schema

    def set(self, field_name: str, value: object) -> None:
        """Set one field value after checking it against the schema.

        Raises:
            HostDocumentError: If the field is unknown or the value has the wrong type.
        """
        field_spec = self._require_field(field_name)
        _check_value(field_spec, value)
        self._values[field_name] = value

    def get(self, field_name: str) -> object | None:
        """Return one field value, or None when it was never set."""
        self._require_field(field_name)
        return self._values.get(field_name)

    def values(self) -> dict[str, object]:
        return dict(self._values)

    def copy(self) -> "Entity":
        return Entity(self._schema, self._values)

    def _require_field(self, field_name: str) -> FieldSpec:
        field_spec = self._schema.field(field_name)
        if field_spec is None:
            raise HostDocumentError(
                f"Field {field_name!r} is not declared by schema {self._schema.schema_name}."
            )
        return field_spec


class DataStorage:
    """Invisible document element holding extensible storage entities.

    Instances handed out by a document are read views; all mutation goes
    through the owning document so it can enforce transactions.
    """

    def __init__(
        self,
        element_id: int,
        name: str,
        entities: Mapping[UUID, Entity] | None = None,
    ) -> None:
        self._element_id = element_id
        self._name = name
        self._entities: dict[UUID, Entity] = dict(entities or {})

    @property
    def element_id(self) -> int:
        return self._element_id

    @property
    def name(self) -> str:
        return self._name

    def get_entity(self, schema_id: UUID) -> Entity | None:
        """Return a copy of the entity stored for a schema, if any."""
        entity = self._entities.get(schema_id)
        return entity.copy() if entity is not None else None

    def has_entity(self, schema_id: UUID) -> bool:
        return schema_id in self._entities

    def entities(self) -> tuple[Entity, ...]:
        return tuple(entity.copy() for entity in self._entities.values())

    def clone(self) -> "DataStorage":
        return DataStorage(
            self._element_id,
            self._name,
            {schema_id: entity.copy() for schema_id, entity in self._entities.items()},
        )

    def _attach(self, entity: Entity) -> None:
        self._entities[entity.schema.schema_id] = entity.copy()


def _check_value(field_spec: FieldSpec, value: object) -> None:
    expected_type = UUID if field_spec.value_type == "guid" else str
    if not isinstance(value, expected_type):
        raise HostDocumentError(
            f"Field {field_spec.name!r} expects {field_spec.value_type}, "
            f"got {type(value).__name__}."
        )
