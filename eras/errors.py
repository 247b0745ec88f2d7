"""Typed exceptions raised by the analysis pipeline."""


class PipelineError(ValueError):
    """Base class for errors that abort an analysis run."""


class ConfigurationError(PipelineError):
    """Raised when the cluster count, iteration budget or another setting is invalid."""


class EmptyInputError(PipelineError):
    """Raised when there are no entities to analyze."""


class DegenerateClusterError(PipelineError):
    """Raised when a cluster has no members at aggregation time."""


class MalformedEntityError(PipelineError):
    """Raised when an entity lacks well-defined features or attributes."""
