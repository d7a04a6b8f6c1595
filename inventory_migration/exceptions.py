"""Exceptions raised by the migration engine.

Every fatal condition of a run derives from MigrationError so the CLI can
report it and exit non-zero.
"""

from typing import Any, Optional


class MigrationError(Exception):
    """Base exception for all migration errors."""
    pass


class ConfigError(MigrationError):
    """Configuration file is missing, unreadable or incomplete."""
    pass


class AuthError(MigrationError):
    """Token could not be obtained for a system."""
    pass


class TransportError(MigrationError):
    """
    A request against the source or destination system failed.

    Raised when:
    - The system answers with a non-2xx status
    - The connection cannot be established
    - The response body is not valid JSON
    """

    def __init__(
        self,
        message: str,
        method: Optional[str] = None,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.method = method
        self.url = url
        self.status_code = status_code


class ReferenceResolutionError(MigrationError):
    """A referenced origin id was not extracted before its referrer."""

    def __init__(self, entity_type: str, origin_id: int, referrer: str = ""):
        message = f"{entity_type} record ID {origin_id} not found"
        if referrer:
            message += f" (referenced by {referrer})"
        super().__init__(message)
        self.entity_type = entity_type
        self.origin_id = origin_id


class SourceDataError(MigrationError):
    """A source record lacks a required field or carries a malformed value."""

    def __init__(self, entity_type: str, origin_id: Optional[Any], detail: str):
        super().__init__(f"Invalid {entity_type} record ID {origin_id} in source: {detail}")
        self.entity_type = entity_type
        self.origin_id = origin_id


class CollisionError(MigrationError):
    """A snapshot id already exists in the destination system."""

    def __init__(self, entity_type: str, origin_id: int, local_name: str = "", dest_name: str = ""):
        super().__init__(
            f'Resource {entity_type}/{origin_id} "{local_name}" already exists in destination '
            f'as "{dest_name}". Clean it before running the import.'
        )
        self.entity_type = entity_type
        self.origin_id = origin_id


class SnapshotError(MigrationError):
    """A snapshot file could not be read or written."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path
