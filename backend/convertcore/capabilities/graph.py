"""
Capability Graph.

Static table of which conversions are possible and by what route.

Design rules:
- Built once, validated once, never mutated at runtime
- Safe for concurrent reads (tuples, frozensets, read-only mappings)
- A pair with no entry is unsupported; nothing degrades silently
- No route revisits a format: an intermediate is never the source or target
- Alternate routes for the same pair are explicit entries with a preference
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple

from .errors import CapabilityGraphError
from .formats import FormatFamily, normalize_format


class PathKind(str, Enum):
    """How a (source, target) pair is reached."""

    DIRECT = "direct"  # One provider invocation
    VIA = "via"  # Two invocations through one intermediate format
    COPY = "copy"  # Source and target are the same format, no invocation
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True)
class ConversionPath:
    kind: PathKind
    intermediate: Optional[str] = None

    def __str__(self) -> str:
        if self.kind == PathKind.VIA:
            return f"via({self.intermediate})"
        return self.kind.value


DIRECT = ConversionPath(PathKind.DIRECT)
COPY = ConversionPath(PathKind.COPY)
UNSUPPORTED = ConversionPath(PathKind.UNSUPPORTED)


def via(intermediate: str) -> ConversionPath:
    return ConversionPath(PathKind.VIA, normalize_format(intermediate))


@dataclass(frozen=True)
class CapabilityEntry:
    """
    One route for one (source, target) pair.

    family is the codec family performing a DIRECT hop. For VIA entries the
    families of both hops come from the two DIRECT entries they chain, and
    family is left as None.

    preference orders alternate entries for the same pair (0 = preferred).
    """

    source: str
    target: str
    path: ConversionPath
    family: Optional[FormatFamily] = None
    preference: int = 0


class CapabilityGraph:
    """
    Immutable capability graph.

    Provides:
    - reachable_targets: every format a source can be converted to
    - resolve_path: the preferred route for a pair
    - paths: every route for a pair, in preference order
    - default_target: the fixed default target for a source
    - pathway_of: the security pathway a source format belongs to
    """

    def __init__(
        self,
        entries: Iterable[CapabilityEntry],
        families: Mapping[str, FormatFamily],
        defaults: Mapping[str, str],
        pathways: Optional[Mapping[str, str]] = None,
    ):
        """
        Build and validate the graph.

        Args:
            entries: Capability entries (direct and via)
            families: format -> family for every known format
            defaults: source format -> default target format
            pathways: source format -> pathway name (optional)

        Raises:
            CapabilityGraphError: If the table is inconsistent
        """
        self._families: Mapping[str, FormatFamily] = MappingProxyType(dict(families))

        grouped: Dict[Tuple[str, str], List[CapabilityEntry]] = {}
        for entry in entries:
            self._check_entry(entry)
            grouped.setdefault((entry.source, entry.target), []).append(entry)

        self._entries: Mapping[Tuple[str, str], Tuple[CapabilityEntry, ...]] = MappingProxyType({
            pair: tuple(sorted(items, key=lambda e: e.preference))
            for pair, items in grouped.items()
        })

        self._check_via_hops()

        reachable: Dict[str, set] = {}
        for source, target in self._entries:
            reachable.setdefault(source, set()).add(target)
        self._reachable: Mapping[str, FrozenSet[str]] = MappingProxyType({
            source: frozenset(targets) for source, targets in reachable.items()
        })

        self._defaults: Mapping[str, str] = MappingProxyType(
            {normalize_format(k): normalize_format(v) for k, v in defaults.items()}
        )
        self._check_defaults()

        self._pathways: Mapping[str, str] = MappingProxyType(
            {normalize_format(k): v for k, v in (pathways or {}).items()}
        )

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def _check_entry(self, entry: CapabilityEntry) -> None:
        for fmt in (entry.source, entry.target):
            if fmt not in self._families:
                raise CapabilityGraphError(f"Unknown format in capability entry: {fmt}")
        if entry.source == entry.target:
            raise CapabilityGraphError(
                f"Self-conversion {entry.source} is implicit and must not be listed"
            )
        if entry.path.kind == PathKind.DIRECT:
            if entry.family is None:
                raise CapabilityGraphError(
                    f"Direct entry {entry.source}->{entry.target} has no codec family"
                )
        elif entry.path.kind == PathKind.VIA:
            hop = entry.path.intermediate
            if hop is None or hop not in self._families:
                raise CapabilityGraphError(
                    f"Via entry {entry.source}->{entry.target} has unknown intermediate {hop}"
                )
            if hop in (entry.source, entry.target):
                raise CapabilityGraphError(
                    f"Via entry {entry.source}->{entry.target} revisits {hop}"
                )
        else:
            raise CapabilityGraphError(
                f"Entry {entry.source}->{entry.target} has non-routable path {entry.path}"
            )

    def _check_via_hops(self) -> None:
        # Every via entry must chain two direct entries, which also rules out
        # nested vias and therefore cycles within a single resolution
        for (source, target), items in self._entries.items():
            for entry in items:
                if entry.path.kind != PathKind.VIA:
                    continue
                hop = entry.path.intermediate
                if self.direct_entry(source, hop) is None:
                    raise CapabilityGraphError(
                        f"Via entry {source}->{target}: no direct hop {source}->{hop}"
                    )
                if self.direct_entry(hop, target) is None:
                    raise CapabilityGraphError(
                        f"Via entry {source}->{target}: no direct hop {hop}->{target}"
                    )

    def _check_defaults(self) -> None:
        for source, target in self._defaults.items():
            if target != source and target not in self._reachable.get(source, frozenset()):
                raise CapabilityGraphError(
                    f"Default target {target} is not reachable from {source}"
                )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def known_formats(self) -> FrozenSet[str]:
        return frozenset(self._families)

    def is_known(self, fmt: str) -> bool:
        return normalize_format(fmt) in self._families

    def family_of(self, fmt: str) -> Optional[FormatFamily]:
        return self._families.get(normalize_format(fmt))

    def pathway_of(self, fmt: str) -> Optional[str]:
        """Security pathway of a source format, or None if not security-sensitive."""
        return self._pathways.get(normalize_format(fmt))

    def reachable_targets(self, source: str) -> FrozenSet[str]:
        """Every target reachable from a source (empty for unknown sources)."""
        return self._reachable.get(normalize_format(source), frozenset())

    def paths(self, source: str, target: str) -> Tuple[CapabilityEntry, ...]:
        """All entries for a pair, preferred first (empty when unsupported)."""
        return self._entries.get((normalize_format(source), normalize_format(target)), ())

    def direct_entry(self, source: str, target: str) -> Optional[CapabilityEntry]:
        """The preferred DIRECT entry for a pair, if any."""
        for entry in self.paths(source, target):
            if entry.path.kind == PathKind.DIRECT:
                return entry
        return None

    def resolve_path(self, source: str, target: str) -> ConversionPath:
        """
        Resolve the preferred route for a pair.

        Returns:
            COPY when source == target (and the format is known),
            the preferred DIRECT or VIA path when an entry exists,
            UNSUPPORTED otherwise
        """
        src = normalize_format(source)
        dst = normalize_format(target)
        if src not in self._families or dst not in self._families:
            return UNSUPPORTED
        if src == dst:
            return COPY
        entries = self._entries.get((src, dst))
        if not entries:
            return UNSUPPORTED
        return entries[0].path

    def default_target(self, source: str) -> Optional[str]:
        """Fixed default target for a source format, or None if there is none."""
        return self._defaults.get(normalize_format(source))

    def pairs(self) -> List[Tuple[str, str]]:
        """Every (source, target) pair with at least one entry, sorted."""
        return sorted(self._entries)

    def __len__(self) -> int:
        return sum(len(items) for items in self._entries.values())
