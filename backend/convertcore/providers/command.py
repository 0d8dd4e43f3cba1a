"""
Command-line codec provider.

Runs one external tool per conversion via subprocess.

Design rules:
- One subprocess per plan step
- The full command string is logged for audit
- Non-zero exit code = ProviderError
- Missing or empty output = ProviderError
- No progress parsing (the scheduler reports step-level progress)
"""

import logging
import shutil
import subprocess
import uuid
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from ..artifacts.models import Artifact
from ..capabilities.formats import FormatFamily, mime_type_for
from ..capabilities.options import StepOptions
from .base import CodecProvider, ProviderResult
from .errors import ProviderError

logger = logging.getLogger(__name__)


# Maximum stderr characters carried into a ProviderError message
STDERR_TAIL = 2000

OptionRenderer = Callable[[StepOptions], List[str]]


def no_option_args(options: StepOptions) -> List[str]:
    return []


class CommandProvider(CodecProvider):
    """
    Provider backed by an external command.

    The argument template may use {input}, {output}, {target} and {tool}
    placeholders, plus {options} as a whole element that expands to the
    arguments produced by option_args.

    Example:
        CommandProvider(
            FormatFamily.AUDIO,
            tool="ffmpeg",
            args=["{tool}", "-y", "-i", "{input}", "{options}", "{output}"],
            output_dir="/srv/convert/temp",
            option_args=lambda o: ["-b:a", o.bitrate],
        )
    """

    def __init__(
        self,
        family: FormatFamily,
        tool: str,
        args: Sequence[str],
        output_dir: str,
        option_args: OptionRenderer = no_option_args,
        timeout_seconds: Optional[float] = 1800,
        name: Optional[str] = None,
    ):
        self._family = family
        self._tool = tool
        self._args = list(args)
        self._output_dir = Path(output_dir)
        self._option_args = option_args
        self._timeout = timeout_seconds
        self._name = name or tool
        self._tool_path: Optional[str] = None

    @property
    def family(self) -> FormatFamily:
        return self._family

    @property
    def name(self) -> str:
        return self._name

    @property
    def available(self) -> bool:
        return self._find_tool() is not None

    def _find_tool(self) -> Optional[str]:
        if self._tool_path is None:
            self._tool_path = shutil.which(self._tool)
        return self._tool_path

    def build_command(self, artifact: Artifact, target_format: str, options: StepOptions, output_path: Path) -> List[str]:
        """Expand the argument template for one conversion."""
        values = {
            "tool": self._find_tool() or self._tool,
            "input": artifact.path,
            "output": str(output_path),
            "target": target_format,
        }
        cmd: List[str] = []
        for arg in self._args:
            if arg == "{options}":
                cmd.extend(self._option_args(options))
            else:
                cmd.append(arg.format(**values))
        return cmd

    def convert(self, artifact: Artifact, target_format: str, options: StepOptions) -> ProviderResult:
        self._output_dir.mkdir(parents=True, exist_ok=True)
        # Unique per call: the same source may be converted by concurrent batches
        output_path = self._output_dir / f"{Path(artifact.path).stem}-{uuid.uuid4().hex[:12]}.{target_format}"

        cmd = self.build_command(artifact, target_format, options, output_path)
        logger.info(f"[{self.name}] Executing: {' '.join(cmd)}")

        try:
            completed = subprocess.run(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                timeout=self._timeout,
            )
        except FileNotFoundError as e:
            raise ProviderError("tool_missing", f"{self._tool} not found: {e}") from e
        except subprocess.TimeoutExpired as e:
            output_path.unlink(missing_ok=True)
            raise ProviderError("timeout", f"{self._tool} exceeded {self._timeout}s") from e

        logger.info(f"[{self.name}] Exited with code {completed.returncode}")

        if completed.returncode != 0:
            output_path.unlink(missing_ok=True)
            stderr = (completed.stderr or "").strip()[-STDERR_TAIL:]
            raise ProviderError(
                "tool_failed",
                stderr or f"{self._tool} exited with code {completed.returncode}",
                exit_code=completed.returncode,
            )

        if not output_path.exists():
            raise ProviderError("output_missing", f"{self._tool} produced no output at {output_path}")
        size = output_path.stat().st_size
        if size == 0:
            output_path.unlink(missing_ok=True)
            raise ProviderError("output_empty", f"{self._tool} produced an empty file")

        return ProviderResult(
            path=str(output_path),
            size_bytes=size,
            mime_type=mime_type_for(target_format),
        )
