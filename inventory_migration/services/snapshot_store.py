"""On-disk snapshot: one JSON array file per entity type."""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Union

from ..exceptions import SnapshotError
from ..models.collection import TYPES, RunContext
from ..models.entities import Entity, entity_from_dict

logger = logging.getLogger(__name__)


class SnapshotStore:
    """
    Export/import boundary between runs.

    store() overwrites <data_dir>/<type>.json. load() requires the file to
    exist, since every type is written by an export even when empty.
    """

    def __init__(self, data_dir: Union[str, Path]):
        self.data_dir = Path(data_dir)

    def path(self, entity_type: str) -> Path:
        return self.data_dir / f"{entity_type}.json"

    def store(self, entity_type: str, collection: Iterable[Union[Entity, Dict[str, Any]]]) -> Path:
        """
        Write one type's collection.

        Args:
            entity_type: Type name, used as the file name
            collection: Entities or already serialized dictionaries

        Returns:
            Path of the written file
        """
        data = [item.to_dict() if isinstance(item, Entity) else item for item in collection]
        filepath = self.path(entity_type)
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            with open(filepath, "w") as f:
                json.dump(data, f, indent=4)
        except OSError as e:
            raise SnapshotError(f"Cannot write snapshot file {filepath}: {e}", path=str(filepath))

        logger.debug(f"Stored {len(data)} {entity_type} records to {filepath}")
        return filepath

    def store_all(self, context: RunContext) -> Dict[str, int]:
        """Store every type of a run, empty ones included."""
        counts = {}
        for entity_type in TYPES:
            collection = context.collection(entity_type)
            self.store(entity_type, collection)
            counts[entity_type] = len(collection)
        return counts

    def load(self, entity_type: str) -> List[Dict[str, Any]]:
        """
        Read one type's snapshot.

        Raises:
            SnapshotError: The file is missing or not a JSON array
        """
        filepath = self.path(entity_type)
        try:
            with open(filepath) as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise SnapshotError(f"Cannot read snapshot file {filepath}: {e}", path=str(filepath))

        if not isinstance(data, list):
            raise SnapshotError(f"Snapshot file {filepath} does not contain a JSON array", path=str(filepath))
        return data

    def load_entities(self, entity_type: str) -> List[Entity]:
        """Read one type's snapshot as entities."""
        return [entity_from_dict(entity_type, item) for item in self.load(entity_type)]
