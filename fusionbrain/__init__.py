"""FusionBrain API client: async HTTP client for text-to-image generation."""

from fusionbrain.client import FusionBrainClient
from fusionbrain.config import FusionBrainConfig, load_config
from fusionbrain.errors import (
    ErrorKind,
    FusionBrainApiError,
    FusionBrainConfigError,
    FusionBrainError,
    ResponseValidationError,
)
from fusionbrain.models import (
    Availability,
    GenerationAccepted,
    GenerationOutcome,
    GenerationRejected,
    ModelInfo,
    StyleInfo,
    Task,
)

__all__ = [
    "FusionBrainClient",
    "FusionBrainConfig",
    "load_config",
    "ErrorKind",
    "FusionBrainError",
    "FusionBrainApiError",
    "FusionBrainConfigError",
    "ResponseValidationError",
    "Availability",
    "GenerationAccepted",
    "GenerationOutcome",
    "GenerationRejected",
    "ModelInfo",
    "StyleInfo",
    "Task",
]
