"""
Artifacts: files owned by the conversion engine and their lifetimes.
"""

from .models import Artifact
from .store import ArtifactStore

__all__ = [
    "Artifact",
    "ArtifactStore",
]
