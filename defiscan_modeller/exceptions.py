"""Exceptions raised while normalizing persisted or imported modeller data."""


class ModellerError(Exception):
    """Base class for modeller errors."""


class ConfigurationError(ModellerError, ValueError):
    """Persisted or imported data does not describe a valid configuration."""
