"""Best-effort removal of previously imported records."""

import logging
from datetime import datetime
from typing import Dict

from ..models.collection import clean_order, destination_path
from ..services.api_client import ApiClient
from ..services.snapshot_store import SnapshotStore
from .base import LoadResult

logger = logging.getLogger(__name__)


class Cleaner:
    """
    Delete snapshot records from the destination in reverse dependency order.

    Used to roll back a failed import and to reset test environments. A
    failed delete is logged and skipped; a missing snapshot file is fatal.
    """

    def __init__(self, client: ApiClient, store: SnapshotStore, dry_run: bool = False):
        self.client = client
        self.store = store
        self.dry_run = dry_run

    def run(self) -> Dict[str, LoadResult]:
        """
        Delete every non-derived type, last-created type first.

        Returns:
            Dictionary of type -> LoadResult
        """
        results = {}
        for entity_type in clean_order():
            print(f"Cleaning {entity_type}")
            results[entity_type] = self.clean_type(entity_type)
        return results

    def clean_type(self, entity_type: str) -> LoadResult:
        """Delete every record of one type."""
        result = LoadResult(entity=entity_type)
        result.started_at = datetime.utcnow()
        path = destination_path(entity_type)

        for record in self.store.load(entity_type):
            record_id = record["id"]
            result.total_attempted += 1

            if self.dry_run:
                logger.info(f"[dry-run] DELETE {path}/{record_id}")
                deleted = True
            else:
                deleted = self.client.delete(f"{path}/{record_id}", ignore_errors=True)

            if deleted:
                result.total_succeeded += 1
                result.ids.append(record_id)
            else:
                result.total_failed += 1
                result.errors.append({"record_id": record_id, "error": "delete failed"})

        result.completed_at = datetime.utcnow()
        logger.info(
            f"Deleted {result.total_succeeded}/{result.total_attempted} {entity_type} records"
        )
        return result
