"""Exceptions raised by the ACC pipeline."""


class AccPipelineError(Exception):
    """Base class for pipeline errors."""


class ConfigurationError(AccPipelineError, ValueError):
    """Invalid or incomplete configuration (unknown selector, empty calibration)."""


class ModelError(AccPipelineError):
    """Classifier training or prediction failed."""


class DataIntegrityError(AccPipelineError):
    """Input tables are malformed or cannot be joined as expected."""
