"""
Codec provider registry.

Design rules:
- Explicit provider binding per family, no inference
- Fallbacks are capability graph entries, never registry lookups
"""

import logging
from typing import Dict, Iterable, List

from ..capabilities.formats import FormatFamily
from .base import CodecProvider
from .errors import ProviderNotAvailableError

logger = logging.getLogger(__name__)


class ProviderRegistry:
    """
    Registry of codec providers keyed by format family.

    Provides:
    - Provider lookup by family
    - Availability listing for diagnostics
    """

    def __init__(self, providers: Iterable[CodecProvider] = ()):
        self._providers: Dict[FormatFamily, CodecProvider] = {}
        for provider in providers:
            self.register(provider)

    def register(self, provider: CodecProvider) -> None:
        """
        Bind a provider to its family, replacing any previous binding.
        """
        previous = self._providers.get(provider.family)
        if previous is not None:
            logger.warning(
                f"Provider '{previous.name}' for {provider.family.value} replaced by '{provider.name}'"
            )
        self._providers[provider.family] = provider
        status = "available" if provider.available else "not available"
        logger.info(f"Provider '{provider.name}' ({provider.family.value}): {status}")

    def get(self, family: FormatFamily) -> CodecProvider:
        """
        Get the provider for a family.

        Raises:
            ProviderNotAvailableError: If none is registered or it is unavailable
        """
        provider = self._providers.get(family)
        if provider is None:
            raise ProviderNotAvailableError(family.value, reason="Provider not registered")
        if not provider.available:
            raise ProviderNotAvailableError(family.value, reason=f"{provider.name} is not installed")
        return provider

    def families(self) -> List[FormatFamily]:
        return list(self._providers)

    def list_providers(self) -> List[Dict[str, object]]:
        """Provider summary for diagnostics."""
        return [
            {
                "family": family.value,
                "name": provider.name,
                "available": provider.available,
            }
            for family, provider in self._providers.items()
        ]
