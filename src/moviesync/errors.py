"""
Error taxonomy shared by the sync engine and the enrichment engine.

  LocalNotFoundError    entity id absent from the local store
  RemoteNotFoundError   WordPress returned 404 for a record
  TransportError        network / HTTP failure talking to WordPress or OMDb
  TranscodeError        field value with an unexpected shape
  ConfigurationError    required credential missing (OMDb key)
  RemoteIdConflictError two local rows would share one WordPress id

Sync errors are logged to SyncLog by the engine and re-raised; the route layer
decides what the user sees.
"""
from typing import Optional


class SyncError(Exception):
    """Base class for every error raised by moviesync."""


class LocalNotFoundError(SyncError):
    """Raised when a local entity id does not exist."""

    def __init__(self, entity_type: str, local_id: int):
        super().__init__(f"{entity_type} with id {local_id} not found")
        self.entity_type = entity_type
        self.local_id = local_id


class RemoteNotFoundError(SyncError):
    """Raised when WordPress has no record for a remote id."""

    def __init__(self, rest_base: str, remote_id: int):
        super().__init__(f"WordPress {rest_base}/{remote_id} not found")
        self.rest_base = rest_base
        self.remote_id = remote_id


class TransportError(SyncError):
    """Raised on network failures and non-2xx responses from a remote API."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class TranscodeError(SyncError):
    """Raised when a field cannot be converted between local and remote form."""


class ConfigurationError(SyncError):
    """Raised when a required credential has not been configured."""


class UnknownEntityTypeError(SyncError):
    """Raised when an entity type has no registered pod schema."""

    def __init__(self, entity_type: str):
        super().__init__(f"Unknown entity type: {entity_type}")
        self.entity_type = entity_type


class RemoteIdConflictError(SyncError):
    """Raised when WordPress hands back an id already linked to another local row."""

    def __init__(self, entity_type: str, remote_id: int, owner_id: int):
        super().__init__(
            f"WordPress id {remote_id} is already linked to {entity_type} {owner_id}"
        )
        self.entity_type = entity_type
        self.remote_id = remote_id
        self.owner_id = owner_id
