"""Custom exceptions for the zone grid pipeline."""


class ZoneGridError(Exception):
    """Base exception for all zone grid errors."""
    pass


class ResourceMissing(ZoneGridError):
    """Raised when the neighborhood boundary file does not exist."""
    pass


class MalformedInput(ZoneGridError):
    """Raised when boundary data cannot be parsed or is structurally invalid."""
    pass


class ExternalServiceUnavailable(ZoneGridError):
    """Raised when the road tile service cannot be reached or answers with an error."""
    pass


class PersistenceFailure(ZoneGridError):
    """Raised when the store rejects the zone replace transaction."""
    pass
