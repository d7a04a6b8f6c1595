"""Shared fixtures: an in-memory stand-in for ApiClient and sample source data."""

from typing import Any, Callable, Dict, List, Optional

import pytest

from inventory_migration.exceptions import TransportError
from inventory_migration.services.api_client import resource_name, unwrap_collection
from inventory_migration.models.collection import RunContext
from inventory_migration.services.snapshot_store import SnapshotStore


class FakeClient:
    """Records every call and answers from canned payloads keyed by path."""

    def __init__(
        self,
        responses: Optional[Dict[str, Any]] = None,
        fail_post: Optional[Callable[[str, Any], bool]] = None,
        fail_delete: Optional[Callable[[str], bool]] = None,
    ):
        self.responses = responses or {}
        self.fail_post = fail_post or (lambda path, data: False)
        self.fail_delete = fail_delete or (lambda path: False)
        self.calls: List[tuple] = []

    def get(self, path: str) -> Any:
        self.calls.append(("GET", path, None))
        return unwrap_collection(self.responses.get(path, []), resource_name(path))

    def list_collection(self, path: str) -> List[Dict[str, Any]]:
        return self.get(path) or []

    def post(self, path: str, data: Any) -> Any:
        self.calls.append(("POST", path, data))
        if self.fail_post(path, data):
            raise TransportError(f"API request failed with status 400 for POST {path}", "POST", path, 400)
        if path in self.responses:
            return self.responses[path]
        return data

    def delete(self, path: str, ignore_errors: bool = False) -> bool:
        self.calls.append(("DELETE", path, None))
        if self.fail_delete(path):
            if ignore_errors:
                return False
            raise TransportError(f"API request failed with status 404 for DELETE {path}", "DELETE", path, 404)
        return True

    def calls_for(self, method: str) -> List[tuple]:
        return [call for call in self.calls if call[0] == method]


@pytest.fixture
def context():
    return RunContext()


@pytest.fixture
def store(tmp_path):
    return SnapshotStore(tmp_path / "data")


@pytest.fixture
def source_responses():
    """A small but complete source inventory."""
    return {
        "/api/controls/tag-type": [
            {
                "id": 1,
                "name": "Language",
                "colour": "#112233",
                "rank": 1,
                "createUser": "alice",
                "updateUser": "bob",
                "tags": [
                    {"id": 99, "name": "Java"},
                    {"id": 100, "name": "COBOL"},
                ],
            },
        ],
        "/api/controls/stakeholder-group": [
            {"id": 7, "name": "Managers", "description": "People managers"},
        ],
        "/api/controls/stakeholder": [
            {
                "id": 20,
                "displayName": "Jane Doe",
                "email": "jane@example.com",
                "jobFunction": {"id": 3, "role": "Architect"},
                "stakeholderGroups": [
                    {"id": 7, "name": "Managers", "description": "People managers"},
                    {"id": 8, "name": "Engineers", "description": None},
                ],
            },
        ],
        "/api/controls/business-service": [
            {"id": 30, "name": "Retail", "description": "Shop", "owner": {"id": 20}},
        ],
        "/api/application-inventory/application?size=2000": {
            "_embedded": {
                "application": [
                    {
                        "id": 10,
                        "name": "A",
                        "description": "Application A",
                        "comments": "",
                        "businessService": "30",
                        "tags": ["99", "100"],
                        "review": {
                            "id": 50,
                            "proposedAction": "rehost",
                            "effortEstimate": "small",
                            "businessCriticality": 3,
                            "workPriority": 2,
                            "comments": "ok",
                        },
                    },
                    {
                        "id": 20,
                        "name": "B",
                        "description": "Application B",
                        "businessService": None,
                        "tags": [],
                        "review": None,
                    },
                ],
            },
        },
        "/api/application-inventory/applications-dependency": [
            {"id": 60, "from": {"id": 10, "name": "A"}, "to": {"id": 20, "name": "B"}},
        ],
        "/api/pathfinder/assessments?applicationId=10": [
            {"id": 70, "applicationId": 10, "status": "COMPLETE"},
        ],
        "/api/pathfinder/assessments/70": {
            "id": 70,
            "stakeholders": [20],
            "stakeholderGroups": [7],
            "questionnaire": {"categories": []},
        },
        "/api/pathfinder/assessments/assessment-risk": [
            {"assessmentId": 70, "applicationId": 10, "category": "c", "question": "q", "answer": "RED"},
        ],
        "/api/pathfinder/assessments/confidence": [
            {"assessmentId": 70, "applicationId": 10, "confidence": 42},
        ],
    }
