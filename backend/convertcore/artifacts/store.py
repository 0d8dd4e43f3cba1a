"""
Artifact store.

Owns the on-disk working area:
- uploads/    sources handed over by the upload layer
- temp/       intermediate outputs of two-step plans
- converted/  final results awaiting retrieval

Release is idempotent: releasing an artifact whose file is already gone is
not an error. Release must happen on every exit path of a plan, so callers
register it on a contextlib.ExitStack rather than calling it inline.
"""

import logging
import shutil
import threading
import time
import uuid
from pathlib import Path
from typing import Dict, Optional, Union

from ..capabilities.formats import mime_type_for, normalize_format
from .models import Artifact

logger = logging.getLogger(__name__)


WORK_SUBDIRS = ("uploads", "temp", "converted")


class ArtifactStore:
    """
    Filesystem-backed artifact registry.

    Thread-safe: independent batches may register and release concurrently.
    """

    def __init__(self, base_dir: Union[str, Path]):
        """
        Initialize store and create the working directories.

        Args:
            base_dir: Root of the working area
        """
        self.base_dir = Path(base_dir).resolve()
        for name in WORK_SUBDIRS:
            (self.base_dir / name).mkdir(parents=True, exist_ok=True)
        self._artifacts: Dict[str, Artifact] = {}
        self._lock = threading.Lock()

    @property
    def uploads_dir(self) -> Path:
        return self.base_dir / "uploads"

    @property
    def temp_dir(self) -> Path:
        return self.base_dir / "temp"

    @property
    def converted_dir(self) -> Path:
        return self.base_dir / "converted"

    def allocate_path(self, fmt: str, temporary: bool = False, stem: str = "artifact") -> Path:
        """
        Reserve a unique output path for a format.

        The file is not created.
        """
        fmt = normalize_format(fmt)
        directory = self.temp_dir if temporary else self.converted_dir
        return directory / f"{stem}-{uuid.uuid4().hex[:12]}.{fmt}"

    def register(
        self,
        path: Union[str, Path],
        fmt: str,
        temporary: bool = False,
        mime_type: Optional[str] = None,
        size_bytes: Optional[int] = None,
    ) -> Artifact:
        """
        Register an existing file as an artifact.

        Args:
            path: File on disk
            fmt: Format of the file
            temporary: Whether the artifact is an intermediate output
            mime_type: MIME type reported by the producer (derived from fmt if None)
            size_bytes: Size reported by the producer (measured if None)

        Raises:
            FileNotFoundError: If the file does not exist
        """
        file_path = Path(path)
        if not file_path.exists():
            raise FileNotFoundError(f"Artifact file not found: {file_path}")
        fmt = normalize_format(fmt)
        artifact = Artifact(
            path=str(file_path),
            format=fmt,
            size_bytes=size_bytes if size_bytes is not None else file_path.stat().st_size,
            mime_type=mime_type or mime_type_for(fmt),
            temporary=temporary,
        )
        with self._lock:
            self._artifacts[artifact.id] = artifact
        logger.debug(
            f"[ArtifactStore] Registered {artifact.id} ({fmt}, {artifact.size_bytes} bytes, "
            f"temporary={temporary})"
        )
        return artifact

    def get(self, artifact_id: str) -> Optional[Artifact]:
        with self._lock:
            return self._artifacts.get(artifact_id)

    def copy(self, artifact: Artifact) -> Artifact:
        """
        Copy an artifact into converted/ unchanged.

        Used for plans whose source and target format are identical.
        """
        destination = self.allocate_path(artifact.format, stem=Path(artifact.path).stem)
        shutil.copyfile(artifact.path, destination)
        return self.register(destination, artifact.format, mime_type=artifact.mime_type)

    def adopt(
        self,
        path: Union[str, Path],
        fmt: str,
        temporary: bool = False,
        mime_type: Optional[str] = None,
        size_bytes: Optional[int] = None,
    ) -> Artifact:
        """
        Move a provider output into temp/ or converted/ and register it.

        Raises:
            FileNotFoundError: If the file does not exist
        """
        source = Path(path)
        if not source.exists():
            raise FileNotFoundError(f"Artifact file not found: {source}")
        destination = self.allocate_path(fmt, temporary=temporary, stem=source.stem)
        shutil.move(str(source), str(destination))
        return self.register(
            destination, fmt, temporary=temporary, mime_type=mime_type, size_bytes=size_bytes
        )

    def release(self, artifact: Artifact) -> bool:
        """
        Delete an artifact's file and forget it.

        Returns:
            True if a file was deleted, False if it was already gone
        """
        with self._lock:
            self._artifacts.pop(artifact.id, None)
        path = Path(artifact.path)
        try:
            path.unlink()
        except FileNotFoundError:
            logger.debug(f"[ArtifactStore] Release of {artifact.id}: file already gone")
            return False
        logger.debug(f"[ArtifactStore] Released {artifact.id} ({path.name})")
        return True

    def purge_expired(self, max_age_seconds: float, now: Optional[float] = None) -> int:
        """
        Delete files older than max_age_seconds from every working directory.

        Args:
            max_age_seconds: Retention deadline
            now: Current epoch time (defaults to time.time())

        Returns:
            Number of files deleted
        """
        now = time.time() if now is None else now
        removed = 0
        for name in WORK_SUBDIRS:
            for path in (self.base_dir / name).iterdir():
                if not path.is_file():
                    continue
                try:
                    age = now - path.stat().st_mtime
                    if age > max_age_seconds:
                        path.unlink()
                        removed += 1
                        logger.info(f"[ArtifactStore] Cleaned up old file: {path}")
                except FileNotFoundError:
                    continue
        if removed:
            with self._lock:
                for artifact_id in [a.id for a in self._artifacts.values() if not a.exists()]:
                    del self._artifacts[artifact_id]
        return removed

    def count(self) -> int:
        with self._lock:
            return len(self._artifacts)
