"""Tests for the Importer, Cleaner and PreflightChecker."""

import pytest

from conftest import FakeClient
from inventory_migration.exceptions import CollisionError, SnapshotError, TransportError
from inventory_migration.loaders.cleaner import Cleaner
from inventory_migration.loaders.importer import Importer
from inventory_migration.models.collection import TYPES, RunContext, clean_order, destination_path, import_order
from inventory_migration.models.entities import Application, AssessmentRisk, Ref, Review, Tag
from inventory_migration.services.preflight import PreflightChecker


@pytest.fixture
def populated_store(store):
    context = RunContext()
    context.add(Tag(id=1, name="Java"))
    context.add(Application(id=7, name="A", business_service=Ref(id=3), tags=[Ref(id=1, name="Java")]))
    context.add(Application(id=8, name="B"))
    context.add(Review(id=50, application=Ref(id=7, name="A")))
    context.add(AssessmentRisk(id=1, assessment_id=70, application_id=7))
    store.store_all(context)
    return store


class TestImporter:
    """Tests for Importer."""

    def test_creates_in_dependency_order(self, populated_store):
        client = FakeClient()

        results = Importer(client, populated_store).run()

        paths = [path for _, path, _ in client.calls_for("POST")]
        assert paths == ["/hub/tags", "/hub/applications", "/hub/applications", "/hub/reviews"]
        assert list(results) == import_order()
        assert results["applications"].total_succeeded == 2
        assert results["applications"].ids == [7, 8]

    def test_posts_snapshot_elements_unchanged(self, populated_store):
        client = FakeClient()

        Importer(client, populated_store).run()

        bodies = [data for _, path, data in client.calls_for("POST") if path == "/hub/applications"]
        assert bodies == populated_store.load("applications")

    def test_derived_types_are_never_created(self, populated_store):
        client = FakeClient()

        Importer(client, populated_store).run()

        assert all("assessment_risks" not in path for _, path, _ in client.calls)

    def test_first_failure_aborts_run(self, populated_store):
        client = FakeClient(fail_post=lambda path, data: data.get("id") == 7)

        with pytest.raises(TransportError):
            Importer(client, populated_store).run()

        paths = [path for _, path, _ in client.calls_for("POST")]
        assert paths == ["/hub/tags", "/hub/applications"]

    def test_dry_run_sends_nothing(self, populated_store):
        client = FakeClient()

        results = Importer(client, populated_store, dry_run=True).run()

        assert client.calls == []
        assert results["tags"].total_succeeded == 1

    def test_missing_snapshot_is_fatal(self, store):
        with pytest.raises(SnapshotError):
            Importer(FakeClient(), store).run()


class TestCleaner:
    """Tests for Cleaner."""

    def test_deletes_in_reverse_order(self, populated_store):
        client = FakeClient()

        results = Cleaner(client, populated_store).run()

        paths = [path for _, path, _ in client.calls_for("DELETE")]
        assert paths == ["/hub/reviews/50", "/hub/applications/7", "/hub/applications/8", "/hub/tags/1"]
        assert list(results) == clean_order()

    def test_failed_delete_is_ignored(self, populated_store):
        client = FakeClient(fail_delete=lambda path: path == "/hub/applications/7")

        results = Cleaner(client, populated_store).run()

        assert results["applications"].total_failed == 1
        assert results["applications"].total_succeeded == 1
        assert ("DELETE", "/hub/tags/1", None) in client.calls

    def test_missing_snapshot_is_fatal(self, store):
        with pytest.raises(SnapshotError):
            Cleaner(FakeClient(), store).run()


class TestPreflightChecker:
    """Tests for PreflightChecker."""

    def test_colliding_id_blocks_import(self, populated_store):
        client = FakeClient({
            destination_path("applications"): [{"id": 7, "name": "Existing"}],
        })

        with pytest.raises(CollisionError) as exc:
            PreflightChecker(client, populated_store).check()

        assert exc.value.entity_type == "applications"
        assert exc.value.origin_id == 7
        assert '"A"' in str(exc.value)
        assert '"Existing"' in str(exc.value)
        assert client.calls_for("POST") == []

    def test_same_id_in_other_type_is_not_a_collision(self, populated_store):
        client = FakeClient({
            destination_path("tags"): [{"id": 7, "name": "Go"}],
        })

        PreflightChecker(client, populated_store).check()

    def test_checks_every_non_derived_type_with_data(self, populated_store):
        client = FakeClient()

        PreflightChecker(client, populated_store).check()

        checked = [path for _, path, _ in client.calls_for("GET")]
        assert checked == ["/hub/tags", "/hub/applications", "/hub/reviews"]
        assert set(TYPES) - set(import_order()) == {"assessment_risks", "assessment_confidences"}
