"""Entity models for the application inventory.

Each destination type has its own dataclass. All of them share the Entity
interface (origin id, natural key, reference fields, wire serialization), and
the type registry and dedup logic only work through that interface.
"""

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, List, Optional, Tuple, Type


@dataclass
class Ref:
    """Embedded pointer to another entity, serialized as {id} or {id, name}."""
    id: int
    name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        data: Dict[str, Any] = {"id": self.id}
        if self.name is not None:
            data["name"] = self.name
        return data

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["Ref"]:
        """Create from dictionary representation, None for an empty pointer."""
        if not data:
            return None
        return cls(id=int(data["id"]), name=data.get("name"))


def _ref_list(items: Optional[List[Dict[str, Any]]]) -> List[Ref]:
    return [Ref.from_dict(item) for item in items or []]


def _optional_dict(ref: Optional[Ref]) -> Optional[Dict[str, Any]]:
    return ref.to_dict() if ref else None


@dataclass
class Entity:
    """
    Base class for every migrated record.

    Subclasses set TYPE to their name in the type registry and implement
    _payload() and _parse() for their own fields. The id is the origin id,
    unique within the origin system and type.
    """
    TYPE: ClassVar[str] = ""

    id: int
    create_user: Optional[str] = None
    update_user: Optional[str] = None

    @property
    def natural_key(self) -> Optional[str]:
        """Human-meaningful key used for cross-system matching."""
        return getattr(self, "name", None)

    def references(self) -> List[Tuple[str, Ref]]:
        """List (type, Ref) pairs for every reference field that is set."""
        return []

    def as_ref(self) -> Ref:
        """Build an {id, name} pointer to this entity."""
        return Ref(id=self.id, name=self.natural_key)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the field set submitted on create."""
        data: Dict[str, Any] = {"id": self.id}
        if self.create_user is not None:
            data["createUser"] = self.create_user
        if self.update_user is not None:
            data["updateUser"] = self.update_user
        data.update(self._payload())
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Entity":
        """Create from a snapshot element."""
        return cls(
            id=int(data["id"]),
            create_user=data.get("createUser"),
            update_user=data.get("updateUser"),
            **cls._parse(data),
        )

    def _payload(self) -> Dict[str, Any]:
        return {}

    @classmethod
    def _parse(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        return {}


@dataclass
class TagCategory(Entity):
    TYPE: ClassVar[str] = "tagtypes"

    name: str = ""
    colour: Optional[str] = None
    rank: Optional[int] = None

    def _payload(self) -> Dict[str, Any]:
        return {"name": self.name, "colour": self.colour, "rank": self.rank}

    @classmethod
    def _parse(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        return {"name": data.get("name", ""), "colour": data.get("colour"), "rank": data.get("rank")}


@dataclass
class Tag(Entity):
    TYPE: ClassVar[str] = "tags"

    name: str = ""
    tag_type: Optional[Ref] = None

    def references(self) -> List[Tuple[str, Ref]]:
        return [(TagCategory.TYPE, self.tag_type)] if self.tag_type else []

    def _payload(self) -> Dict[str, Any]:
        return {"name": self.name, "tagType": _optional_dict(self.tag_type)}

    @classmethod
    def _parse(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        return {"name": data.get("name", ""), "tag_type": Ref.from_dict(data.get("tagType"))}


@dataclass
class JobRole(Entity):
    TYPE: ClassVar[str] = "jobfunctions"

    name: str = ""

    def _payload(self) -> Dict[str, Any]:
        return {"name": self.name}

    @classmethod
    def _parse(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        return {"name": data.get("name", "")}


@dataclass
class StakeholderGroup(Entity):
    TYPE: ClassVar[str] = "stakeholdergroups"

    name: str = ""
    description: Optional[str] = None

    def _payload(self) -> Dict[str, Any]:
        return {"name": self.name, "description": self.description}

    @classmethod
    def _parse(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        return {"name": data.get("name", ""), "description": data.get("description")}


@dataclass
class Stakeholder(Entity):
    TYPE: ClassVar[str] = "stakeholders"

    name: str = ""
    email: Optional[str] = None
    job_function: Optional[Ref] = None
    stakeholder_groups: List[Ref] = field(default_factory=list)

    def references(self) -> List[Tuple[str, Ref]]:
        refs = [(StakeholderGroup.TYPE, ref) for ref in self.stakeholder_groups]
        if self.job_function:
            refs.append((JobRole.TYPE, self.job_function))
        return refs

    def _payload(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "email": self.email,
            "jobFunction": _optional_dict(self.job_function),
            "stakeholderGroups": [ref.to_dict() for ref in self.stakeholder_groups],
        }

    @classmethod
    def _parse(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "name": data.get("name", ""),
            "email": data.get("email"),
            "job_function": Ref.from_dict(data.get("jobFunction")),
            "stakeholder_groups": _ref_list(data.get("stakeholderGroups")),
        }


@dataclass
class BusinessService(Entity):
    TYPE: ClassVar[str] = "businessservices"

    name: str = ""
    description: Optional[str] = None
    owner: Optional[Ref] = None

    def references(self) -> List[Tuple[str, Ref]]:
        return [(Stakeholder.TYPE, self.owner)] if self.owner else []

    def _payload(self) -> Dict[str, Any]:
        return {"name": self.name, "description": self.description, "owner": _optional_dict(self.owner)}

    @classmethod
    def _parse(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "name": data.get("name", ""),
            "description": data.get("description"),
            "owner": Ref.from_dict(data.get("owner")),
        }


@dataclass
class Application(Entity):
    TYPE: ClassVar[str] = "applications"

    name: str = ""
    description: Optional[str] = None
    comments: Optional[str] = None
    business_service: Optional[Ref] = None
    tags: List[Ref] = field(default_factory=list)

    def references(self) -> List[Tuple[str, Ref]]:
        refs = [(Tag.TYPE, ref) for ref in self.tags]
        if self.business_service:
            refs.append((BusinessService.TYPE, self.business_service))
        return refs

    def _payload(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "comments": self.comments,
            "businessService": _optional_dict(self.business_service),
            "tags": [ref.to_dict() for ref in self.tags],
        }

    @classmethod
    def _parse(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "name": data.get("name", ""),
            "description": data.get("description"),
            "comments": data.get("comments"),
            "business_service": Ref.from_dict(data.get("businessService")),
            "tags": _ref_list(data.get("tags")),
        }


@dataclass
class Proxy(Entity):
    TYPE: ClassVar[str] = "proxies"

    kind: str = ""
    host: str = ""
    port: Optional[int] = None

    @property
    def natural_key(self) -> Optional[str]:
        return self.kind or None

    def _payload(self) -> Dict[str, Any]:
        return {"kind": self.kind, "host": self.host, "port": self.port}

    @classmethod
    def _parse(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        return {"kind": data.get("kind", ""), "host": data.get("host", ""), "port": data.get("port")}


@dataclass
class Dependency(Entity):
    """Application to application edge, serialized with "from" and "to" keys."""
    TYPE: ClassVar[str] = "dependencies"

    source: Optional[Ref] = None
    target: Optional[Ref] = None

    @property
    def natural_key(self) -> Optional[str]:
        return None

    def references(self) -> List[Tuple[str, Ref]]:
        return [(Application.TYPE, ref) for ref in (self.source, self.target) if ref]

    def _payload(self) -> Dict[str, Any]:
        return {"from": _optional_dict(self.source), "to": _optional_dict(self.target)}

    @classmethod
    def _parse(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        return {"source": Ref.from_dict(data.get("from")), "target": Ref.from_dict(data.get("to"))}


@dataclass
class Assessment(Entity):
    TYPE: ClassVar[str] = "assessments"

    application_id: Optional[int] = None
    status: Optional[str] = None
    stakeholders: List[Any] = field(default_factory=list)
    stakeholder_groups: List[Any] = field(default_factory=list)
    questionnaire: Optional[Dict[str, Any]] = None

    @property
    def natural_key(self) -> Optional[str]:
        return None

    def references(self) -> List[Tuple[str, Ref]]:
        return [(Application.TYPE, Ref(id=self.application_id))] if self.application_id else []

    def _payload(self) -> Dict[str, Any]:
        return {
            "applicationId": self.application_id,
            "status": self.status,
            "stakeholders": self.stakeholders,
            "stakeholderGroups": self.stakeholder_groups,
            "questionnaire": self.questionnaire,
        }

    @classmethod
    def _parse(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "application_id": data.get("applicationId"),
            "status": data.get("status"),
            "stakeholders": data.get("stakeholders") or [],
            "stakeholder_groups": data.get("stakeholderGroups") or [],
            "questionnaire": data.get("questionnaire"),
        }


@dataclass
class AssessmentRisk(Entity):
    TYPE: ClassVar[str] = "assessment_risks"

    assessment_id: Optional[int] = None
    application_id: Optional[int] = None
    category: Optional[Any] = None
    question: Optional[Any] = None
    answer: Optional[Any] = None

    @property
    def natural_key(self) -> Optional[str]:
        return None

    def references(self) -> List[Tuple[str, Ref]]:
        return [(Application.TYPE, Ref(id=self.application_id))] if self.application_id else []

    def _payload(self) -> Dict[str, Any]:
        return {
            "assessmentId": self.assessment_id,
            "applicationId": self.application_id,
            "category": self.category,
            "question": self.question,
            "answer": self.answer,
        }

    @classmethod
    def _parse(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "assessment_id": data.get("assessmentId"),
            "application_id": data.get("applicationId"),
            "category": data.get("category"),
            "question": data.get("question"),
            "answer": data.get("answer"),
        }


@dataclass
class AssessmentConfidence(Entity):
    TYPE: ClassVar[str] = "assessment_confidences"

    assessment_id: Optional[int] = None
    application_id: Optional[int] = None
    confidence: Optional[int] = None

    @property
    def natural_key(self) -> Optional[str]:
        return None

    def references(self) -> List[Tuple[str, Ref]]:
        return [(Application.TYPE, Ref(id=self.application_id))] if self.application_id else []

    def _payload(self) -> Dict[str, Any]:
        return {
            "assessmentId": self.assessment_id,
            "applicationId": self.application_id,
            "confidence": self.confidence,
        }

    @classmethod
    def _parse(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "assessment_id": data.get("assessmentId"),
            "application_id": data.get("applicationId"),
            "confidence": data.get("confidence"),
        }


@dataclass
class Review(Entity):
    TYPE: ClassVar[str] = "reviews"

    business_criticality: Optional[int] = None
    effort_estimate: Optional[str] = None
    proposed_action: Optional[str] = None
    work_priority: Optional[int] = None
    comments: Optional[str] = None
    application: Optional[Ref] = None

    @property
    def natural_key(self) -> Optional[str]:
        return None

    def references(self) -> List[Tuple[str, Ref]]:
        return [(Application.TYPE, self.application)] if self.application else []

    def _payload(self) -> Dict[str, Any]:
        return {
            "businessCriticality": self.business_criticality,
            "effortEstimate": self.effort_estimate,
            "proposedAction": self.proposed_action,
            "workPriority": self.work_priority,
            "comments": self.comments,
            "application": _optional_dict(self.application),
        }

    @classmethod
    def _parse(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "business_criticality": data.get("businessCriticality"),
            "effort_estimate": data.get("effortEstimate"),
            "proposed_action": data.get("proposedAction"),
            "work_priority": data.get("workPriority"),
            "comments": data.get("comments"),
            "application": Ref.from_dict(data.get("application")),
        }


@dataclass
class Identity(Entity):
    TYPE: ClassVar[str] = "identities"

    name: str = ""
    kind: str = ""
    description: Optional[str] = None

    def _payload(self) -> Dict[str, Any]:
        return {"name": self.name, "kind": self.kind, "description": self.description}

    @classmethod
    def _parse(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        return {"name": data.get("name", ""), "kind": data.get("kind", ""), "description": data.get("description")}


ENTITY_CLASSES: Dict[str, Type[Entity]] = {
    cls.TYPE: cls
    for cls in (
        TagCategory,
        Tag,
        JobRole,
        StakeholderGroup,
        Stakeholder,
        BusinessService,
        Application,
        Proxy,
        Dependency,
        Assessment,
        AssessmentRisk,
        AssessmentConfidence,
        Review,
        Identity,
    )
}


def entity_from_dict(entity_type: str, data: Dict[str, Any]) -> Entity:
    """Rebuild an entity of the given type from its snapshot element."""
    try:
        cls = ENTITY_CLASSES[entity_type]
    except KeyError:
        raise ValueError(f"Unknown entity type: {entity_type}")
    return cls.from_dict(data)
