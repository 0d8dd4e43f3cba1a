"""
Codec provider abstraction.

Design rules:
- One provider per format family
- Providers are opaque: the engine only calls convert()
- Providers never manage temporary artifacts; the scheduler does
- Failure is signalled by raising ProviderError, never by a sentinel result
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from ..artifacts.models import Artifact
from ..capabilities.formats import FormatFamily
from ..capabilities.options import StepOptions


@dataclass(frozen=True)
class ProviderResult:
    """What a provider hands back: where the output is, how big, what type."""

    path: str
    size_bytes: int
    mime_type: str


class CodecProvider(ABC):
    """
    Abstract base class for codec providers.

    Providers are stateless with respect to jobs: all context is passed per call.
    """

    @property
    @abstractmethod
    def family(self) -> FormatFamily:
        """Format family served by this provider."""
        pass

    @property
    def name(self) -> str:
        """Human-readable provider name for logs."""
        return type(self).__name__

    @property
    def available(self) -> bool:
        """Whether the underlying tool is usable on this system."""
        return True

    @abstractmethod
    def convert(
        self,
        artifact: Artifact,
        target_format: str,
        options: StepOptions,
    ) -> ProviderResult:
        """
        Convert one artifact to the target format.

        Args:
            artifact: Input artifact (read-only for the provider)
            target_format: Canonical target format
            options: Validated option set for this step

        Returns:
            ProviderResult describing the output file

        Raises:
            ProviderError: If the conversion fails
        """
        pass
