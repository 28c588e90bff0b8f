"""
Localizable Cleanup Type Definitions

Defines the data structures, diagnostic kinds and fatal errors shared by the
parser, extractor, reconciler and cleaner of Localizable.strings resources.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Protocol, Tuple


# Message bus topics
TOPIC_DIAGNOSTIC = "localizable.diagnostic"
TOPIC_FINISHED = "localizable.finished"

COMPLETION_MARKER = "✅ Localizable cleanup complete"


class Pathable(Protocol):
    """Anything a diagnostic can be attributed to"""
    path: str


class Severity(Enum):
    """How a diagnostic should be presented"""
    ERROR = "error"
    WARNING = "warning"


class DiagnosticKind(Enum):
    """Non-fatal findings produced by the reconciler"""
    KEY_MISMATCH_ACROSS_FILES = "key_mismatch_across_files"
    MISSING_KEY_IN_RESOURCE_FILE = "missing_key_in_resource_file"
    DEAD_KEY_WARNING = "dead_key_warning"

    @property
    def severity(self) -> Severity:
        if self is DiagnosticKind.DEAD_KEY_WARNING:
            return Severity.WARNING
        return Severity.ERROR


@dataclass(frozen=True)
class ResourceFile:
    """A parsed Localizable.strings file; tokens keep their quotes"""
    path: str
    entries: Mapping[str, str]

    def __post_init__(self):
        object.__setattr__(self, "entries", MappingProxyType(dict(self.entries)))

    @property
    def keys(self) -> FrozenSet[str]:
        return frozenset(self.entries)

    def __len__(self) -> int:
        return len(self.entries)


@dataclass(frozen=True)
class CodeReferenceFile:
    """A source file reduced to the key tokens it looks up"""
    path: str
    keys: FrozenSet[str] = frozenset()

    def __post_init__(self):
        object.__setattr__(self, "keys", frozenset(self.keys))


@dataclass(frozen=True)
class DiscoveredFiles:
    """Candidate paths handed to the cleaner by discovery"""
    resource_paths: Tuple[str, ...] = ()
    source_paths: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "resource_paths", tuple(self.resource_paths))
        object.__setattr__(self, "source_paths", tuple(self.source_paths))


@dataclass(frozen=True)
class Diagnostic:
    """A single reconciliation finding"""
    kind: DiagnosticKind
    path: str
    keys: Tuple[str, ...]

    @classmethod
    def for_file(cls, kind: DiagnosticKind, source: Pathable, keys: Iterable[str]) -> "Diagnostic":
        return cls(kind=kind, path=source.path, keys=tuple(sorted(keys)))

    @property
    def severity(self) -> Severity:
        return self.kind.severity

    def message(self) -> str:
        joined = ", ".join(self.keys)
        if self.kind is DiagnosticKind.KEY_MISMATCH_ACROSS_FILES:
            return f"Found extra key: {joined} in file: {self.path}"
        if self.kind is DiagnosticKind.MISSING_KEY_IN_RESOURCE_FILE:
            return f"Found keys in code: {joined} in file: {self.path}, not defined in strings file"
        return f"Unused keys in {self.path}: {joined}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "severity": self.severity.value,
            "path": self.path,
            "keys": list(self.keys),
        }


@dataclass
class ReconciliationReport:
    """Diagnostics and bookkeeping accumulated over one cleanup run"""
    diagnostics: List[Diagnostic] = field(default_factory=list)
    resource_files: List[ResourceFile] = field(default_factory=list)
    code_files: List[CodeReferenceFile] = field(default_factory=list)
    rewritten_paths: List[str] = field(default_factory=list)

    def add(self, diagnostic: Diagnostic):
        self.diagnostics.append(diagnostic)

    def extend(self, diagnostics: Iterable[Diagnostic]):
        for diagnostic in diagnostics:
            self.add(diagnostic)

    def of_kind(self, kind: DiagnosticKind) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.kind is kind]

    @property
    def errors(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.severity is Severity.ERROR]

    @property
    def warnings(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.severity is Severity.WARNING]

    def has_errors(self) -> bool:
        return bool(self.errors)

    @property
    def base_file(self) -> Optional[ResourceFile]:
        return self.resource_files[0] if self.resource_files else None

    def summary(self) -> str:
        return (
            f"{len(self.resource_files)} resource files, "
            f"{len(self.code_files)} source files, "
            f"{len(self.errors)} errors, {len(self.warnings)} warnings"
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "resource_files": [f.path for f in self.resource_files],
            "code_files": [f.path for f in self.code_files],
            "rewritten": list(self.rewritten_paths),
            "diagnostics": [d.to_dict() for d in self.diagnostics],
            "summary": self.summary(),
        }


class LocalizableError(Exception):
    """Base class for conditions that abort the whole run"""


class ConfigError(LocalizableError):
    """Configuration file is missing or malformed"""


class DirectoryEnumerationError(LocalizableError):
    """The working tree could not be listed"""

    def __init__(self, root: str, reason: str = ""):
        self.root = root
        detail = f": {reason}" if reason else ""
        super().__init__(f"Could not locate files in path directory: {root}{detail}")


class UnreadableFileError(LocalizableError):
    """A selected file could not be read as text"""

    def __init__(self, path: str, reason: str = ""):
        self.path = path
        detail = f": {reason}" if reason else ""
        super().__init__(f"Could not read from path: {path}{detail}")


class StructuralMismatchError(LocalizableError):
    """Key and value token counts differ in a resource file"""

    def __init__(self, path: str, key_count: int, value_count: int):
        self.path = path
        self.key_count = key_count
        self.value_count = value_count
        super().__init__(
            f"Error parsing contents of {path}: "
            f"found {key_count} keys but {value_count} values"
        )


class DuplicateKeyError(LocalizableError):
    """The same key token appears twice in one resource file"""

    def __init__(self, key: str, path: str):
        self.key = key
        self.path = path
        super().__init__(f"Found duplicate key: {key} in file: {path}")


class NoBaseResourceFileError(LocalizableError):
    """Missing/dead checks need at least one resource file"""

    def __init__(self):
        super().__init__("No Localizable.strings file found to use as base")


class UnwritableFileError(LocalizableError):
    """A resource file could not be rewritten"""

    def __init__(self, path: str, reason: str = ""):
        self.path = path
        detail = f": {reason}" if reason else ""
        super().__init__(f"Could not write to path: {path}{detail}")
