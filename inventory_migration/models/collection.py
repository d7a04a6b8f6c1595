"""Type registry, per-type collections and the per-run context."""

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

from .entities import Entity, ENTITY_CLASSES


# Creation order. A type only references types listed before it.
TYPES: Tuple[str, ...] = (
    "tagtypes",
    "tags",
    "jobfunctions",
    "stakeholdergroups",
    "stakeholders",
    "businessservices",
    "applications",
    "proxies",
    "dependencies",
    "assessments",
    "assessment_risks",
    "assessment_confidences",
    "reviews",
    "identities",
)

# Expected to be pre-populated in a fresh destination; deduplicated by name.
SEED_TYPES: Tuple[str, ...] = ("tagtypes", "tags", "jobfunctions")

# Computed by the destination server, never created or deleted directly.
DERIVED_TYPES: Tuple[str, ...] = ("assessment_risks", "assessment_confidences")

DESTINATION_PATHS: Dict[str, str] = {
    "assessments": "/hub/pathfinder/assessments",
}


def destination_path(entity_type: str) -> str:
    """Get the destination collection path for a type."""
    return DESTINATION_PATHS.get(entity_type, f"/hub/{entity_type}")


def import_order() -> List[str]:
    """Types replayed at the destination, in creation order."""
    return [t for t in TYPES if t not in DERIVED_TYPES]


def clean_order() -> List[str]:
    """Types deleted from the destination: exact reverse of import_order()."""
    return list(reversed(import_order()))


def normalize_key(key: Optional[str]) -> Optional[str]:
    """Normalize a natural key for cross-system matching."""
    if key is None:
        return None
    return key.strip().lower()


class TypeCollection:
    """
    Ordered, append-only list of entities of a single type.

    Adding an entity whose origin id is already present is a no-op.
    """

    def __init__(self, entity_type: str):
        if entity_type not in ENTITY_CLASSES:
            raise ValueError(f"Unknown entity type: {entity_type}")
        self.entity_type = entity_type
        self._items: List[Entity] = []
        self._by_id: Dict[int, Entity] = {}

    def add(self, entity: Entity) -> bool:
        """
        Append an entity unless its origin id is already present.

        Args:
            entity: Entity of this collection's type

        Returns:
            True if the entity was appended
        """
        if entity.TYPE != self.entity_type:
            raise ValueError(f"Cannot add {entity.TYPE} entity to {self.entity_type} collection")
        if entity.id in self._by_id:
            return False
        self._items.append(entity)
        self._by_id[entity.id] = entity
        return True

    def get(self, origin_id: int) -> Optional[Entity]:
        """Get an entity by origin id."""
        return self._by_id.get(origin_id)

    def to_list(self) -> List[Dict]:
        """Serialize every entity in insertion order."""
        return [entity.to_dict() for entity in self._items]

    def __contains__(self, origin_id: int) -> bool:
        return origin_id in self._by_id

    def __iter__(self) -> Iterator[Entity]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"TypeCollection({self.entity_type!r}, {len(self)} items)"


class DestinationIndex:
    """Seed-type entities that already exist in the destination, by natural key."""

    def __init__(self):
        self._index: Dict[str, Dict[str, Entity]] = {t: {} for t in SEED_TYPES}

    def add(self, entity: Entity) -> None:
        """Index a destination entity under its normalized natural key."""
        if entity.TYPE not in self._index:
            raise ValueError(f"{entity.TYPE} is not a seed type")
        self._index[entity.TYPE][normalize_key(entity.natural_key)] = entity

    def find(self, entity_type: str, key: Optional[str]) -> Optional[Entity]:
        """Look up a destination entity by natural key."""
        if key is None:
            return None
        return self._index.get(entity_type, {}).get(normalize_key(key))

    def __contains__(self, item: Tuple[str, str]) -> bool:
        entity_type, key = item
        return self.find(entity_type, key) is not None

    def count(self, entity_type: str) -> int:
        return len(self._index.get(entity_type, {}))


class OriginIndex:
    """
    Origin id to entity lookup, filled during extraction.

    For a deduplicated entity the index holds the destination substitute, so
    later references resolve to the identity that will exist after import.
    """

    def __init__(self):
        self._index: Dict[str, Dict[int, Entity]] = {t: {} for t in TYPES}

    def register(self, entity_type: str, origin_id: int, entity: Entity) -> None:
        self._index[entity_type][origin_id] = entity

    def resolve(self, entity_type: str, origin_id: int) -> Optional[Entity]:
        return self._index[entity_type].get(origin_id)


@dataclass
class RunContext:
    """State of one export run, passed explicitly through every stage."""
    collections: Dict[str, TypeCollection] = field(
        default_factory=lambda: {t: TypeCollection(t) for t in TYPES}
    )
    destination_index: DestinationIndex = field(default_factory=DestinationIndex)
    origin_index: OriginIndex = field(default_factory=OriginIndex)
    warnings: List[str] = field(default_factory=list)

    def add(self, entity: Entity) -> bool:
        """Add an entity to its type collection."""
        return self.collections[entity.TYPE].add(entity)

    def collection(self, entity_type: str) -> TypeCollection:
        return self.collections[entity_type]

    def counts(self) -> Dict[str, int]:
        """Number of entities collected per type."""
        return {t: len(c) for t, c in self.collections.items()}
