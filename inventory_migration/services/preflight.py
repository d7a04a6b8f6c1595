"""Collision check run before any destination mutation."""

import logging
from typing import List, Optional

from ..exceptions import CollisionError
from ..models.collection import destination_path, import_order
from .api_client import ApiClient
from .snapshot_store import SnapshotStore

logger = logging.getLogger(__name__)


class PreflightChecker:
    """
    Refuse an import whose snapshot ids already exist at the destination.

    The check is all-or-nothing: every type is compared before the Importer
    sends its first create.
    """

    def __init__(self, client: ApiClient, store: SnapshotStore):
        self.client = client
        self.store = store

    def check(self, types: Optional[List[str]] = None) -> None:
        """
        Compare snapshot ids with destination ids, type by type.

        Raises:
            CollisionError: On the first id present on both sides
            SnapshotError: A snapshot file is missing
        """
        for entity_type in types or import_order():
            print(f"Checking {entity_type} in destination..")
            self.check_type(entity_type)

    def check_type(self, entity_type: str) -> None:
        local_collection = self.store.load(entity_type)
        if not local_collection:
            return

        dest_collection = self.client.list_collection(destination_path(entity_type))
        dest_by_id = {obj["id"]: obj for obj in dest_collection}
        for import_obj in local_collection:
            dest_obj = dest_by_id.get(import_obj["id"])
            if dest_obj is not None:
                raise CollisionError(
                    entity_type,
                    import_obj["id"],
                    local_name=import_obj.get("name", ""),
                    dest_name=dest_obj.get("name", ""),
                )
        logger.debug(f"No {entity_type} collisions ({len(local_collection)} local, {len(dest_collection)} destination)")
