"""Entity lookup over classifier results."""

from collections.abc import Iterable

from ..models import Entity


def find_entity(entities: Iterable[Entity], type_name: str) -> Entity | None:
    """Return the first entity whose type is exactly ``type_name``.

    No fuzzy matching and no confidence threshold: callers rely on the
    classifier's ordering.
    """
    for entity in entities:
        if entity.type == type_name:
            return entity
    return None


def find_first_entity(
    entities: Iterable[Entity], *type_names: str
) -> tuple[str, Entity] | None:
    """Try several entity types in priority order.

    Returns the matched type name together with the entity.
    """
    entities = list(entities)
    for type_name in type_names:
        entity = find_entity(entities, type_name)
        if entity is not None:
            return type_name, entity
    return None
