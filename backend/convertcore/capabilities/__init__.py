"""
Capabilities: what can be converted, by which route, with which options.

This module is pure data and planning inputs.
It does NOT invoke codec tools or touch the filesystem.
"""

from .errors import (
    CapabilityError,
    CapabilityGraphError,
    ResolutionError,
    UnsupportedFormatError,
    InvalidOptionsError,
)
from .formats import (
    FormatFamily,
    normalize_format,
    format_from_filename,
    family_of,
    mime_type_for,
    is_known_format,
)
from .graph import (
    PathKind,
    ConversionPath,
    CapabilityEntry,
    CapabilityGraph,
)
from .options import (
    StepOptions,
    QualityTier,
    option_model_for,
    parse_options,
)
from .catalog import build_default_graph, SPREADSHEET_PATHWAY

__all__ = [
    # Errors
    "CapabilityError",
    "CapabilityGraphError",
    "ResolutionError",
    "UnsupportedFormatError",
    "InvalidOptionsError",
    # Formats
    "FormatFamily",
    "normalize_format",
    "format_from_filename",
    "family_of",
    "mime_type_for",
    "is_known_format",
    # Graph
    "PathKind",
    "ConversionPath",
    "CapabilityEntry",
    "CapabilityGraph",
    "build_default_graph",
    "SPREADSHEET_PATHWAY",
    # Options
    "StepOptions",
    "QualityTier",
    "option_model_for",
    "parse_options",
]
