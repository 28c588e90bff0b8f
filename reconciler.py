"""
Key reconciliation across resource files and source references.

All checks are observational: they return diagnostics and never raise for a
finding. The first resource file is the base for every comparison.
"""

import logging
from typing import List, Sequence

from localizable_types import (
    CodeReferenceFile, Diagnostic, DiagnosticKind, NoBaseResourceFileError, ResourceFile
)


logger = logging.getLogger(__name__)


def _base_file(resource_files: Sequence[ResourceFile]) -> ResourceFile:
    if not resource_files:
        raise NoBaseResourceFileError()
    return resource_files[0]


def match_keys(resource_files: Sequence[ResourceFile]) -> List[Diagnostic]:
    """
    Makes sure all resource files contain the same keys as the base file.

    Only the first differing key (in sort order) is reported per file. The
    file that contains that key is the one reported, even when it is the
    base and the other file is the one lacking it.
    """
    if len(resource_files) < 2:
        return []

    base = resource_files[0]
    diagnostics = []
    for other in resource_files[1:]:
        difference = base.keys.symmetric_difference(other.keys)
        if not difference:
            continue
        extra_key = min(difference)
        incorrect = other if extra_key in other.keys else base
        diagnostics.append(
            Diagnostic.for_file(DiagnosticKind.KEY_MISMATCH_ACROSS_FILES, incorrect, [extra_key])
        )
        logger.debug(f"{other.path} differs from {base.path} by {len(difference)} keys")
    return diagnostics


def missing_keys(code_files: Sequence[CodeReferenceFile],
                 resource_files: Sequence[ResourceFile]) -> List[Diagnostic]:
    """Keys referenced in code but not defined in the base resource file"""
    base_keys = _base_file(resource_files).keys
    diagnostics = []
    for code_file in code_files:
        extra_keys = code_file.keys - base_keys
        if extra_keys:
            diagnostics.append(
                Diagnostic.for_file(DiagnosticKind.MISSING_KEY_IN_RESOURCE_FILE, code_file, extra_keys)
            )
    return diagnostics


def dead_keys(code_files: Sequence[CodeReferenceFile],
              resource_files: Sequence[ResourceFile]) -> List[Diagnostic]:
    """Keys defined in the base resource file but referenced nowhere"""
    base = _base_file(resource_files)
    referenced = set()
    for code_file in code_files:
        referenced.update(code_file.keys)

    unused = base.keys - referenced
    if not unused:
        return []
    return [Diagnostic.for_file(DiagnosticKind.DEAD_KEY_WARNING, base, unused)]
