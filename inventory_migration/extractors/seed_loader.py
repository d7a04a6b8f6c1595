"""Preload destination seed data for deduplication."""

import logging

from ..models.collection import RunContext, destination_path
from ..models.entities import JobRole, Ref, Tag, TagCategory
from ..services.api_client import ApiClient

logger = logging.getLogger(__name__)


class DestinationSeedLoader:
    """
    Index the destination's tag categories, tags and job roles by name.

    Must run before the source extraction when dedup is wanted. When skipped,
    every seed entity is exported as new.
    """

    def __init__(self, client: ApiClient):
        self.client = client

    def load(self, context: RunContext) -> None:
        """Fill context.destination_index from the destination system."""
        index = context.destination_index

        for tt2 in self.client.list_collection(destination_path(TagCategory.TYPE)):
            category = TagCategory(
                id=tt2["id"],
                name=tt2["name"],
                colour=tt2.get("colour"),
                rank=tt2.get("rank"),
            )
            index.add(category)
            for t2 in tt2.get("tags") or []:
                index.add(Tag(id=t2["id"], name=t2["name"], tag_type=Ref(id=category.id, name=category.name)))

        for jf2 in self.client.list_collection(destination_path(JobRole.TYPE)):
            index.add(JobRole(id=jf2["id"], name=jf2["name"]))

        logger.info(
            f"Loaded destination seeds: {index.count(TagCategory.TYPE)} tag types, "
            f"{index.count(Tag.TYPE)} tags, {index.count(JobRole.TYPE)} job functions"
        )
