"""Replay a snapshot into the destination system."""

import logging
from datetime import datetime
from typing import Dict, List, Optional

from ..models.collection import destination_path, import_order
from ..services.api_client import ApiClient
from ..services.snapshot_store import SnapshotStore
from .base import LoadResult

logger = logging.getLogger(__name__)


class Importer:
    """
    Create every snapshot record at the destination, in dependency order.

    The first failed create raises and stops the run. The destination may
    then hold part of the snapshot; run the Cleaner before retrying.
    """

    def __init__(self, client: ApiClient, store: SnapshotStore, dry_run: bool = False):
        """
        Initialize the importer.

        Args:
            client: Client for the destination system
            store: Snapshot to replay
            dry_run: If True, log records without sending them
        """
        self.client = client
        self.store = store
        self.dry_run = dry_run

    def run(self, types: Optional[List[str]] = None) -> Dict[str, LoadResult]:
        """
        Import every non-derived type.

        Args:
            types: Override the type order (must respect dependency order)

        Returns:
            Dictionary of type -> LoadResult
        """
        results = {}
        for entity_type in types or import_order():
            print(f"Processing {entity_type}")
            results[entity_type] = self.import_type(entity_type)
        return results

    def import_type(self, entity_type: str) -> LoadResult:
        """Create every record of one type."""
        result = LoadResult(entity=entity_type)
        result.started_at = datetime.utcnow()
        path = destination_path(entity_type)

        for record in self.store.load(entity_type):
            result.total_attempted += 1
            if self.dry_run:
                logger.info(f"[dry-run] POST {path}: {record}")
                result.total_succeeded += 1
                continue

            created = self.client.post(path, record)
            result.total_succeeded += 1
            if isinstance(created, dict) and created.get("id") is not None:
                result.ids.append(created["id"])

        result.completed_at = datetime.utcnow()
        logger.info(f"Created {result.total_succeeded} {entity_type} records")
        return result
