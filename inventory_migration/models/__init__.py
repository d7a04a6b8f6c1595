"""Data models for the migration engine."""

from .entities import (
    Ref,
    Entity,
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
    ENTITY_CLASSES,
    entity_from_dict,
)
from .collection import (
    TYPES,
    SEED_TYPES,
    DERIVED_TYPES,
    TypeCollection,
    DestinationIndex,
    OriginIndex,
    RunContext,
    destination_path,
    import_order,
    clean_order,
)
from .migration import (
    MigrationConfig,
    SystemConfig,
    MigrationRun,
    MigrationStep,
    MigrationStatus,
    RunAction,
)

__all__ = [
    "Ref",
    "Entity",
    "TagCategory",
    "Tag",
    "JobRole",
    "StakeholderGroup",
    "Stakeholder",
    "BusinessService",
    "Application",
    "Proxy",
    "Dependency",
    "Assessment",
    "AssessmentRisk",
    "AssessmentConfidence",
    "Review",
    "Identity",
    "ENTITY_CLASSES",
    "entity_from_dict",
    "TYPES",
    "SEED_TYPES",
    "DERIVED_TYPES",
    "TypeCollection",
    "DestinationIndex",
    "OriginIndex",
    "RunContext",
    "destination_path",
    "import_order",
    "clean_order",
    "MigrationConfig",
    "SystemConfig",
    "MigrationRun",
    "MigrationStep",
    "MigrationStatus",
    "RunAction",
]
