"""Core error types and run configuration."""

from macsforge.core.errors import (
    MACSError,
    InvalidInputError,
    InvalidDataError,
    InsufficientDataError,
    OutOfRangeError,
    FetchError,
    AccuracyWarning,
)
from macsforge.core.config import (
    DEFAULT_TEMPERATURES_KEV,
    EXFOR_BASE_URL,
    QUADRATURE_METHODS,
    MACSConfig,
    check_temperature,
    parse_temperatures,
)

__all__ = [
    "MACSError",
    "InvalidInputError",
    "InvalidDataError",
    "InsufficientDataError",
    "OutOfRangeError",
    "FetchError",
    "AccuracyWarning",
    "DEFAULT_TEMPERATURES_KEV",
    "EXFOR_BASE_URL",
    "QUADRATURE_METHODS",
    "MACSConfig",
    "check_temperature",
    "parse_temperatures",
]
