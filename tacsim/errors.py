"""Exception types for the TAC simulator."""


class ConfigurationError(ValueError):
    """Raised when the catalog, adjustment table, grid or settings are inconsistent."""
