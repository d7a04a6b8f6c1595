"""Tests for SnapshotStore."""

import json

import pytest

from inventory_migration.exceptions import SnapshotError
from inventory_migration.models.collection import TYPES, RunContext
from inventory_migration.models.entities import (
    ENTITY_CLASSES,
    Application,
    Assessment,
    AssessmentConfidence,
    AssessmentRisk,
    BusinessService,
    Dependency,
    Identity,
    JobRole,
    Proxy,
    Ref,
    Review,
    Stakeholder,
    StakeholderGroup,
    Tag,
    TagCategory,
)


class TestSnapshotStore:
    """Tests for storing and loading snapshot files."""

    def test_store_creates_directory_and_named_file(self, store):
        path = store.store("tags", [Tag(id=1, name="Java")])

        assert path == store.data_dir / "tags.json"
        assert json.loads(path.read_text()) == [{"id": 1, "name": "Java", "tagType": None}]

    def test_load_returns_stored_collection(self, store):
        tags = [Tag(id=1, name="Java", tag_type=Ref(id=5, name="Language")), Tag(id=2, name="Go")]

        store.store("tags", tags)

        assert store.load("tags") == [tag.to_dict() for tag in tags]
        assert store.load_entities("tags") == tags

    def test_store_overwrites(self, store):
        store.store("tags", [Tag(id=1, name="Java")])
        store.store("tags", [])

        assert store.load("tags") == []

    def test_dependency_endpoints_survive_round_trip(self, store):
        dependency = Dependency(id=1, source=Ref(id=10, name="A"), target=Ref(id=20, name="B"))

        store.store("dependencies", [dependency])
        loaded = store.load("dependencies")[0]

        assert loaded["from"] == {"id": 10, "name": "A"}
        assert loaded["to"] == {"id": 20, "name": "B"}

    def test_store_all_writes_every_type(self, store):
        context = RunContext()
        context.add(Tag(id=1, name="Java"))

        counts = store.store_all(context)

        assert counts["tags"] == 1
        for entity_type in TYPES:
            assert (store.data_dir / f"{entity_type}.json").exists()

    def test_missing_file_is_fatal(self, store):
        with pytest.raises(SnapshotError) as exc:
            store.load("applications")

        assert "applications.json" in str(exc.value)

    def test_non_array_file_is_fatal(self, store):
        store.data_dir.mkdir(parents=True)
        (store.data_dir / "tags.json").write_text('{"id": 1}')

        with pytest.raises(SnapshotError):
            store.load("tags")


POPULATED_ENTITIES = {
    "tagtypes": TagCategory(id=1, name="Language", colour="#112233", rank=2, create_user="alice", update_user="bob"),
    "tags": Tag(id=2, name="Java", tag_type=Ref(id=1, name="Language")),
    "jobfunctions": JobRole(id=3, name="Architect", create_user="alice"),
    "stakeholdergroups": StakeholderGroup(id=4, name="Managers", description="People managers"),
    "stakeholders": Stakeholder(
        id=5,
        name="Jane Doe",
        email="jane@example.com",
        job_function=Ref(id=3, name="Architect"),
        stakeholder_groups=[Ref(id=4, name="Managers")],
    ),
    "businessservices": BusinessService(id=6, name="Retail", description="Shop", owner=Ref(id=5, name="Jane Doe")),
    "applications": Application(
        id=7,
        name="A",
        description="Application A",
        comments="legacy",
        business_service=Ref(id=6),
        tags=[Ref(id=2, name="Java")],
    ),
    "proxies": Proxy(id=8, kind="http", host="proxy.example.com", port=3128),
    "dependencies": Dependency(id=9, source=Ref(id=7, name="A"), target=Ref(id=17, name="B")),
    "assessments": Assessment(
        id=10,
        application_id=7,
        status="COMPLETE",
        stakeholders=[5],
        stakeholder_groups=[4],
        questionnaire={"categories": [{"id": 1, "questions": []}]},
    ),
    "assessment_risks": AssessmentRisk(id=11, assessment_id=10, application_id=7, category="c", question="q", answer="RED"),
    "assessment_confidences": AssessmentConfidence(id=12, assessment_id=10, application_id=7, confidence=42),
    "reviews": Review(
        id=13,
        business_criticality=3,
        effort_estimate="small",
        proposed_action="rehost",
        work_priority=2,
        comments="ok",
        application=Ref(id=7, name="A"),
    ),
    "identities": Identity(id=14, name="git", kind="source", description="Git credentials"),
}


def test_every_type_has_a_populated_sample():
    assert set(POPULATED_ENTITIES) == set(ENTITY_CLASSES)


@pytest.mark.parametrize("entity_type", sorted(ENTITY_CLASSES))
def test_load_returns_what_was_stored(store, entity_type):
    entity = POPULATED_ENTITIES[entity_type]

    store.store(entity_type, [entity])

    assert store.load(entity_type) == [entity.to_dict()]
    assert store.load_entities(entity_type) == [entity]
