"""Core math package for CVT display timing calculations."""

from .models import ModeRequest, Resolution, TimingDescriptor, Variant, VARIANT_CONSTANTS
from .errors import InvalidInputError, TimingError, UnsupportedCombinationError
from .conversions import (
    ConversionError,
    mode_request_from_mapping,
    parse_refresh_rate,
    parse_resolution,
    parse_variant,
)
from .engine import compute, compute_request
from .modeline import format_modeline, mode_name, timing_to_dict

__all__ = [
    "ModeRequest",
    "Resolution",
    "TimingDescriptor",
    "Variant",
    "VARIANT_CONSTANTS",
    "TimingError",
    "InvalidInputError",
    "UnsupportedCombinationError",
    "ConversionError",
    "mode_request_from_mapping",
    "parse_refresh_rate",
    "parse_resolution",
    "parse_variant",
    "compute",
    "compute_request",
    "format_modeline",
    "mode_name",
    "timing_to_dict",
]
