"""Errors raised while loading routing tables."""


class CatalogError(ValueError):
    """Raised when the signal, model or pricing tables are misconfigured."""
