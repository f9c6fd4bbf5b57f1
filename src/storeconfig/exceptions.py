"""Custom exception hierarchy for storeconfig."""

from __future__ import annotations


class StoreConfigError(Exception):
    """Base exception for all storeconfig errors."""


class StoreConfigSettingsError(StoreConfigError):
    """Invalid or missing settings."""


class InvalidZoneError(StoreConfigError):
    """Timezone identifier is not a recognized IANA zone.

    Fatal to the single calculation that needed the zone, never to the
    cache itself.
    """

    def __init__(self, message: str, *, zone: str = "") -> None:
        self.zone = zone
        super().__init__(message)


class SourceUnavailableError(StoreConfigError):
    """Configuration source unreachable, rejected credentials, or timed out."""

    def __init__(self, message: str, *, source: str = "") -> None:
        self.source = source
        super().__init__(message)


class MalformedRecordError(StoreConfigError):
    """A single source row could not be mapped to a store.

    The loader logs and skips the row; this is never raised out of a load.
    """

    def __init__(self, message: str, *, record_id: str = "", reason: str = "") -> None:
        self.record_id = record_id
        self.reason = reason
        super().__init__(message)


class DuplicateTokenError(StoreConfigError):
    """Two active rows share a location token; the whole load is rejected."""

    def __init__(self, message: str, *, token: str = "") -> None:
        # Holds the masked token, never the full credential.
        self.token = token
        super().__init__(message)
