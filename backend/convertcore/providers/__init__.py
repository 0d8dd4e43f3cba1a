"""
Codec providers: the only boundary to external conversion tools.
"""

from .errors import ProviderError, ProviderNotAvailableError
from .base import CodecProvider, ProviderResult
from .registry import ProviderRegistry
from .command import CommandProvider

__all__ = [
    "ProviderError",
    "ProviderNotAvailableError",
    "CodecProvider",
    "ProviderResult",
    "ProviderRegistry",
    "CommandProvider",
]
