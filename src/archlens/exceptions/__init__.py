"""Exception hierarchy for ArchLens."""

from .analysis import AnalysisError, InputContractError, require_sequence
from .base import ArchLensError
from .config import ConfigFileError, ConfigurationError, InvalidConfigError

__all__ = [
    "ArchLensError",
    "AnalysisError",
    "InputContractError",
    "require_sequence",
    "ConfigurationError",
    "ConfigFileError",
    "InvalidConfigError",
]
