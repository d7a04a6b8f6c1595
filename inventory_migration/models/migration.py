"""Migration configuration and run tracking models."""

import json
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from enum import Enum
from datetime import datetime
import uuid

from ..exceptions import ConfigError


class MigrationStatus(str, Enum):
    """Status of a migration run."""
    PENDING = "pending"
    EXTRACTING = "extracting"
    STORING = "storing"
    CHECKING = "checking"
    LOADING = "loading"
    CLEANING = "cleaning"
    COMPLETED = "completed"
    FAILED = "failed"


class RunAction(str, Enum):
    """Actions accepted on the command line."""
    EXPORT_SOURCE = "export-source"
    IMPORT = "import"
    CLEAN = "clean"


@dataclass
class SystemConfig:
    """Connection settings for the source or destination system."""
    url: str
    username: Optional[str] = None
    password: Optional[str] = None
    realm: str = "tackle"
    client_id: str = "tackle-ui"
    token: Optional[str] = None  # Pre-issued bearer token, skips the password grant

    @property
    def requires_auth(self) -> bool:
        return bool(self.username) and not self.token

    @classmethod
    def from_dict(cls, data: Dict[str, Any], label: str) -> "SystemConfig":
        """Create from dictionary representation."""
        if not isinstance(data, dict) or not data.get("url"):
            raise ConfigError(f"Missing '{label}.url' in configuration")
        return cls(
            url=data["url"].rstrip("/"),
            username=data.get("username"),
            password=data.get("password"),
            realm=data.get("realm", "tackle"),
            client_id=data.get("client_id", "tackle-ui"),
            token=data.get("token"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation, without secrets."""
        return {
            "url": self.url,
            "username": self.username,
            "realm": self.realm,
            "client_id": self.client_id,
        }


@dataclass
class MigrationConfig:
    """Configuration for a migration."""
    source: SystemConfig
    destination: SystemConfig
    verify_ssl: bool = True
    page_size: int = 2000
    retry_config: Dict[str, Any] = field(default_factory=lambda: {
        "max_retries": 0,
        "backoff_factor": 0.0,
    })

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "source": self.source.to_dict(),
            "destination": self.destination.to_dict(),
            "verify_ssl": self.verify_ssl,
            "page_size": self.page_size,
            "retry_config": self.retry_config,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MigrationConfig":
        """Create from dictionary representation."""
        return cls(
            source=SystemConfig.from_dict(data.get("source"), "source"),
            destination=SystemConfig.from_dict(data.get("destination"), "destination"),
            verify_ssl=data.get("verify_ssl", True),
            page_size=int(data.get("page_size", 2000)),
            retry_config=data.get("retry_config", {"max_retries": 0, "backoff_factor": 0.0}),
        )

    @classmethod
    def from_json_file(cls, path: str) -> "MigrationConfig":
        """Load configuration from a JSON file."""
        if not os.path.exists(path):
            raise ConfigError(f"Configuration file not found: {path}")
        try:
            with open(path) as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Cannot read configuration file {path}: {e}")
        if not isinstance(data, dict):
            raise ConfigError(f"Configuration file {path} must contain a JSON object")
        return cls.from_dict(data)


@dataclass
class MigrationStep:
    """A single step in a migration process."""
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    name: str = ""
    entity: str = ""
    status: MigrationStatus = MigrationStatus.PENDING
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    records_processed: int = 0
    records_succeeded: int = 0
    records_failed: int = 0
    errors: List[Dict[str, Any]] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "id": self.id,
            "name": self.name,
            "entity": self.entity,
            "status": self.status.value,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "records_processed": self.records_processed,
            "records_succeeded": self.records_succeeded,
            "records_failed": self.records_failed,
            "errors": self.errors,
            "warnings": self.warnings,
        }

    @property
    def duration_seconds(self) -> Optional[float]:
        """Get duration in seconds."""
        if self.started_at and self.completed_at:
            return (self.completed_at - self.started_at).total_seconds()
        return None


@dataclass
class MigrationRun:
    """One export, import or clean run."""
    action: RunAction
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    status: MigrationStatus = MigrationStatus.PENDING
    data_dir: str = ""
    dry_run: bool = False

    created_at: datetime = field(default_factory=datetime.utcnow)
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    steps: List[MigrationStep] = field(default_factory=list)
    errors: List[Dict[str, Any]] = field(default_factory=list)

    total_records_processed: int = 0
    total_records_succeeded: int = 0
    total_records_failed: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "id": self.id,
            "action": self.action.value,
            "status": self.status.value,
            "data_dir": self.data_dir,
            "dry_run": self.dry_run,
            "created_at": self.created_at.isoformat(),
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "steps": [s.to_dict() for s in self.steps],
            "total_records_processed": self.total_records_processed,
            "total_records_succeeded": self.total_records_succeeded,
            "total_records_failed": self.total_records_failed,
            "errors": self.errors,
        }

    @property
    def duration_seconds(self) -> Optional[float]:
        """Get duration in seconds."""
        if self.started_at and self.completed_at:
            return (self.completed_at - self.started_at).total_seconds()
        return None

    def add_step(self, name: str, entity: str = "") -> MigrationStep:
        """Add a new step to the run."""
        step = MigrationStep(name=name, entity=entity)
        self.steps.append(step)
        return step

    def update_totals(self) -> None:
        """Update total statistics from steps."""
        self.total_records_processed = sum(s.records_processed for s in self.steps)
        self.total_records_succeeded = sum(s.records_succeeded for s in self.steps)
        self.total_records_failed = sum(s.records_failed for s in self.steps)
