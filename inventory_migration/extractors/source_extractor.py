"""Source system extraction into the destination entity graph."""

import itertools
import logging
from typing import Any, Callable, Dict, Iterable, List, Optional

from ..exceptions import ReferenceResolutionError, SourceDataError
from ..models.collection import RunContext
from ..models.entities import (
    Application,
    Assessment,
    AssessmentConfidence,
    AssessmentRisk,
    BusinessService,
    Dependency,
    JobRole,
    Ref,
    Review,
    Stakeholder,
    StakeholderGroup,
    Tag,
    TagCategory,
)
from ..services.api_client import ApiClient

logger = logging.getLogger(__name__)


def _audit(record: Dict[str, Any]) -> Dict[str, Any]:
    return {"create_user": record.get("createUser"), "update_user": record.get("updateUser")}


def _ref(record: Optional[Dict[str, Any]]) -> Optional[Ref]:
    """Copy an embedded {id, name} pointer verbatim."""
    if not record:
        return None
    return Ref(id=int(record["id"]), name=record.get("name"))


class SourceExtractor:
    """
    Build the destination entity graph from the source system.

    Handles:
    - Tag types and tags, deduplicated against destination seeds
    - Stakeholder groups, stakeholders and their job functions
    - Business services with their owner
    - Applications, their tags and embedded reviews
    - Application dependencies (copied without id remap)
    - Assessments, risks and confidences per application

    Every step reads and extends the same RunContext, so calls are strictly
    sequential and ordered: a reference can only resolve to an entity
    extracted by an earlier step.
    """

    ENDPOINTS = {
        "tagtypes": "/api/controls/tag-type",
        "stakeholdergroups": "/api/controls/stakeholder-group",
        "stakeholders": "/api/controls/stakeholder",
        "businessservices": "/api/controls/business-service",
        "applications": "/api/application-inventory/application",
        "dependencies": "/api/application-inventory/applications-dependency",
        "assessments": "/api/pathfinder/assessments",
        "assessment_risks": "/api/pathfinder/assessments/assessment-risk",
        "assessment_confidences": "/api/pathfinder/assessments/confidence",
    }

    def __init__(self, client: ApiClient, context: RunContext, page_size: int = 2000):
        """
        Initialize the extractor.

        Args:
            client: Client for the source system
            context: Run context, with the destination index already loaded
            page_size: Page size requested for the application collection
        """
        self.client = client
        self.context = context
        self.page_size = page_size
        # Risk and confidence records carry no id of their own
        self._derived_ids = {
            AssessmentRisk.TYPE: itertools.count(1),
            AssessmentConfidence.TYPE: itertools.count(1),
        }

    def extract_all(self) -> RunContext:
        """Extract every supported type in dependency order."""
        self.extract_tag_types()
        self.extract_stakeholder_groups()
        self.extract_stakeholders()
        self.extract_business_services()
        self.extract_applications()
        self.extract_dependencies()
        self.extract_assessments()
        # proxies and identities have no source counterpart to extract
        return self.context

    def add_warning(self, message: str) -> None:
        """Record a non-fatal extraction warning."""
        self.context.warnings.append(message)
        logger.warning(message)

    def resolve(self, entity_type: str, origin_id: int, referrer: str = "") -> Ref:
        """
        Resolve an origin id to a pointer at the entity that will exist
        after import: either the extracted one or its destination substitute.

        Raises:
            ReferenceResolutionError: The id was never extracted
        """
        entity = self.context.origin_index.resolve(entity_type, origin_id)
        if entity is None:
            raise ReferenceResolutionError(entity_type, origin_id, referrer)
        return entity.as_ref()

    def _register(self, entity_type: str, origin_id: int, entity) -> None:
        self.context.origin_index.register(entity_type, origin_id, entity)

    def _project(self, entity_type: str, record: Any, build: Callable[..., Any], *args) -> Any:
        """
        Run one record projection, reporting a malformed record as SourceDataError.

        Raises:
            SourceDataError: A required field is missing or a value has the wrong shape
        """
        try:
            return build(record, *args)
        except (KeyError, TypeError, ValueError) as e:
            origin_id = record.get("id") if isinstance(record, dict) else None
            detail = f"missing field {e}" if isinstance(e, KeyError) else str(e)
            raise SourceDataError(entity_type, origin_id, detail) from e

    def _project_each(self, entity_type: str, records: Iterable[Any], build: Callable[..., Any], *args) -> List[Any]:
        return [self._project(entity_type, record, build, *args) for record in records]

    def extract_tag_types(self) -> None:
        """Extract tag types and their tags, skipping names seeded at the destination."""
        collection = self.client.list_collection(self.ENDPOINTS["tagtypes"])
        self._project_each(TagCategory.TYPE, collection, self._tag_type)

    def _tag_type(self, tt1: Dict[str, Any]) -> None:
        category = TagCategory(
            id=int(tt1["id"]),
            name=tt1["name"],
            colour=tt1.get("colour"),
            rank=tt1.get("rank"),
            **_audit(tt1),
        )
        existing_category = self.context.destination_index.find(TagCategory.TYPE, category.name)
        if existing_category:
            logger.debug(f"Tag type {category.name} exists in destination, reusing id {existing_category.id}")
            self._register(TagCategory.TYPE, category.id, existing_category)
            category_ref = existing_category.as_ref()
        else:
            self.context.add(category)
            self._register(TagCategory.TYPE, category.id, category)
            category_ref = category.as_ref()

        self._project_each(Tag.TYPE, tt1.get("tags") or [], self._tag, category_ref)

    def _tag(self, tag1: Dict[str, Any], category_ref: Ref) -> None:
        tag_id = int(tag1["id"])
        existing_tag = self.context.destination_index.find(Tag.TYPE, tag1["name"])
        if existing_tag:
            logger.debug(f"Tag {tag1['name']} exists in destination, reusing id {existing_tag.id}")
            self._register(Tag.TYPE, tag_id, existing_tag)
            return
        tag = Tag(id=tag_id, name=tag1["name"], tag_type=category_ref, **_audit(tag1))
        self.context.add(tag)
        self._register(Tag.TYPE, tag.id, tag)

    def _stakeholder_group(self, sg1: Dict[str, Any]) -> StakeholderGroup:
        group = StakeholderGroup(
            id=int(sg1["id"]),
            name=sg1["name"],
            description=sg1.get("description"),
            **_audit(sg1),
        )
        if self.context.add(group):
            self._register(StakeholderGroup.TYPE, group.id, group)
        return self.context.collection(StakeholderGroup.TYPE).get(group.id)

    def extract_stakeholder_groups(self) -> None:
        """Extract stakeholder groups."""
        collection = self.client.list_collection(self.ENDPOINTS["stakeholdergroups"])
        self._project_each(StakeholderGroup.TYPE, collection, self._stakeholder_group)

    def _job_function(self, jf1: Optional[Dict[str, Any]]) -> Optional[Ref]:
        """Reuse a destination job function by name, or mint a new one."""
        if not jf1:
            return None
        jf_id = int(jf1["id"])
        name = jf1.get("role") or jf1["name"]
        existing = self.context.destination_index.find(JobRole.TYPE, name)
        if existing:
            self._register(JobRole.TYPE, jf_id, existing)
            return existing.as_ref()

        job_role = JobRole(id=jf_id, name=name, **_audit(jf1))
        self.context.add(job_role)
        self._register(JobRole.TYPE, job_role.id, job_role)
        return job_role.as_ref()

    def extract_stakeholders(self) -> None:
        """Extract stakeholders together with their groups and job function."""
        collection = self.client.list_collection(self.ENDPOINTS["stakeholders"])
        self._project_each(Stakeholder.TYPE, collection, self._stakeholder)

    def _stakeholder(self, sh1: Dict[str, Any]) -> None:
        groups = self._project_each(
            StakeholderGroup.TYPE, sh1.get("stakeholderGroups") or [], self._stakeholder_group
        )
        job_function = self._project(JobRole.TYPE, sh1.get("jobFunction"), self._job_function)
        stakeholder = Stakeholder(
            id=int(sh1["id"]),
            name=sh1.get("displayName") or sh1["name"],
            email=sh1.get("email"),
            job_function=job_function,
            stakeholder_groups=[group.as_ref() for group in groups],
            **_audit(sh1),
        )
        self.context.add(stakeholder)
        self._register(Stakeholder.TYPE, stakeholder.id, stakeholder)

    def extract_business_services(self) -> None:
        """Extract business services, resolving their owner stakeholder."""
        collection = self.client.list_collection(self.ENDPOINTS["businessservices"])
        self._project_each(BusinessService.TYPE, collection, self._business_service)

    def _business_service(self, bs1: Dict[str, Any]) -> None:
        owner = None
        if bs1.get("owner"):
            owner = self.resolve(
                Stakeholder.TYPE,
                int(bs1["owner"]["id"]),
                referrer=f"businessservices/{bs1['id']}",
            )
        service = BusinessService(
            id=int(bs1["id"]),
            name=bs1["name"],
            description=bs1.get("description"),
            owner=owner,
            **_audit(bs1),
        )
        self.context.add(service)
        self._register(BusinessService.TYPE, service.id, service)

    def extract_applications(self) -> None:
        """Extract applications and the reviews embedded in them."""
        path = f"{self.ENDPOINTS['applications']}?size={self.page_size}"
        self._project_each(Application.TYPE, self.client.list_collection(path), self._application)

    def _application(self, app1: Dict[str, Any]) -> None:
        app_id = int(app1["id"])
        referrer = f"applications/{app_id}"
        tags = [self.resolve(Tag.TYPE, int(tag_id), referrer) for tag_id in app1.get("tags") or []]

        business_service = None
        if app1.get("businessService"):
            business_service = Ref(id=int(app1["businessService"]))
        else:
            self.add_warning(
                f"Application {app_id} {app1['name']} has no businessService, which is required "
                f"by the destination. Set it manually in applications.json before import."
            )

        app = Application(
            id=app_id,
            name=app1["name"],
            description=app1.get("description"),
            comments=app1.get("comments"),
            business_service=business_service,
            tags=tags,
            **_audit(app1),
        )
        self.context.add(app)
        self._register(Application.TYPE, app.id, app)

        if app1.get("review"):
            self._project(Review.TYPE, app1["review"], self._review, app)

    def _review(self, rev1: Dict[str, Any], app: Application) -> None:
        review = Review(
            id=int(rev1["id"]),
            business_criticality=rev1.get("businessCriticality"),
            effort_estimate=rev1.get("effortEstimate"),
            proposed_action=rev1.get("proposedAction"),
            work_priority=rev1.get("workPriority"),
            comments=rev1.get("comments"),
            application=app.as_ref(),
            **_audit(rev1),
        )
        self.context.add(review)

    def extract_dependencies(self) -> None:
        """
        Extract application dependencies.

        Both endpoints are copied as {id, name} without remapping, which
        assumes applications keep their ids in the destination.
        """
        collection = self.client.list_collection(self.ENDPOINTS["dependencies"])
        self._project_each(Dependency.TYPE, collection, self._dependency)

    def _dependency(self, dep1: Dict[str, Any]) -> None:
        dependency = Dependency(
            id=int(dep1["id"]),
            source=_ref(dep1.get("from")),
            target=_ref(dep1.get("to")),
            **_audit(dep1),
        )
        self.context.add(dependency)

    def extract_assessments(self) -> None:
        """Extract the assessment of every extracted application, with risks and confidence."""
        for app in list(self.context.collection(Application.TYPE)):
            self._application_assessment(app)

    def _application_assessment(self, app: Application) -> None:
        base = self.ENDPOINTS["assessments"]
        collection = self.client.list_collection(f"{base}?applicationId={app.id}")
        if not collection:
            logger.debug(f"Application {app.id} has no assessment")
            return

        # Only one assessment per application is expected
        assm1 = collection[0]
        assessment_id = self._project(Assessment.TYPE, assm1, lambda record: int(record["id"]))
        detail = self.client.get(f"{base}/{assessment_id}") or {}
        assessment = self._project(Assessment.TYPE, assm1, self._assessment, detail, app)
        self.context.add(assessment)

        query = [{"applicationId": app.id}]
        risks = self._post_collection(self.ENDPOINTS["assessment_risks"], query)
        self._project_each(AssessmentRisk.TYPE, risks, self._risk, assessment)
        confidences = self._post_collection(self.ENDPOINTS["assessment_confidences"], query)
        self._project_each(AssessmentConfidence.TYPE, confidences, self._confidence, assessment)

    def _assessment(self, assm1: Dict[str, Any], detail: Dict[str, Any], app: Application) -> Assessment:
        return Assessment(
            id=int(assm1["id"]),
            application_id=int(assm1.get("applicationId", app.id)),
            status=assm1.get("status"),
            stakeholders=detail.get("stakeholders") or [],
            stakeholder_groups=detail.get("stakeholderGroups") or [],
            questionnaire=detail.get("questionnaire"),
            **_audit(assm1),
        )

    def _risk(self, risk1: Dict[str, Any], assessment: Assessment) -> None:
        self.context.add(AssessmentRisk(
            id=self._derived_id(AssessmentRisk.TYPE, risk1),
            assessment_id=risk1.get("assessmentId", assessment.id),
            application_id=risk1.get("applicationId", assessment.application_id),
            category=risk1.get("category"),
            question=risk1.get("question"),
            answer=risk1.get("answer"),
        ))

    def _confidence(self, conf1: Dict[str, Any], assessment: Assessment) -> None:
        self.context.add(AssessmentConfidence(
            id=self._derived_id(AssessmentConfidence.TYPE, conf1),
            assessment_id=conf1.get("assessmentId", assessment.id),
            application_id=conf1.get("applicationId", assessment.application_id),
            confidence=conf1.get("confidence"),
        ))

    def _post_collection(self, path: str, query: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        return self.client.post(path, query) or []

    def _derived_id(self, entity_type: str, record: Dict[str, Any]) -> int:
        if record.get("id") is not None:
            return int(record["id"])
        return next(self._derived_ids[entity_type])
