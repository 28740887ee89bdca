class SkywardError(Exception):
    """Base exception for Skyward errors."""


class ProviderError(SkywardError):
    """Raised when an external timing provider fails or returns garbage."""


class PositionTableError(SkywardError):
    """Raised for malformed position table data."""
