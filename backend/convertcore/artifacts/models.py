"""
Artifact model.

An artifact is a file on disk known to the ArtifactStore: an uploaded
source, an intermediate conversion output, or a final result.
"""

import uuid
from datetime import datetime
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class Artifact(BaseModel):
    """
    Handle to one file owned by the conversion engine.

    temporary=True marks intermediate outputs that must be released once the
    next plan step no longer needs them.
    """

    model_config = ConfigDict(extra="forbid")

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    path: str
    format: str
    size_bytes: int = 0
    mime_type: str = "application/octet-stream"
    temporary: bool = False
    created_at: datetime = Field(default_factory=datetime.now)

    @property
    def filename(self) -> str:
        return Path(self.path).name

    def exists(self) -> bool:
        return Path(self.path).exists()
