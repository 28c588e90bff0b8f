"""
File discovery for the Localizable cleanup run.

Walks a project tree once and selects Localizable.strings resources and the
Swift / Objective-C sources that may reference their keys.
"""

import logging
import os
from pathlib import Path, PurePosixPath
from typing import List

from localizable_config import LocalizableConfig
from localizable_types import (
    DirectoryEnumerationError, DiscoveredFiles, UnreadableFileError
)


logger = logging.getLogger(__name__)


def list_files(root: str) -> List[str]:
    """List of files under root, recursive, relative to root"""
    base = Path(root)
    if not base.is_dir():
        raise DirectoryEnumerationError(root, "not a directory")

    def _raise(error: OSError):
        raise DirectoryEnumerationError(root, str(error))

    files = []
    for dirpath, _dirnames, filenames in os.walk(base, onerror=_raise):
        rel_dir = Path(dirpath).relative_to(base)
        for name in filenames:
            files.append((rel_dir / name).as_posix())
    return sorted(files)


def is_resource_file(path: str, config: LocalizableConfig) -> bool:
    parts = PurePosixPath(path).parts
    excluded = set(config.get_excluded_segments())
    return path.endswith(config.get_resource_suffix()) and not excluded.intersection(parts)


def is_source_file(path: str, config: LocalizableConfig) -> bool:
    marker = config.get_excluded_name_marker().lower()
    if marker and marker in path.lower():
        return False
    return PurePosixPath(path).suffix.lstrip(".") in config.get_source_extensions()


def discover_files(root: str, config: LocalizableConfig) -> DiscoveredFiles:
    """Select resource and source paths under root"""
    files = list_files(root)
    resources = [os.path.join(root, f) for f in files if is_resource_file(f, config)]
    sources = [os.path.join(root, f) for f in files if is_source_file(f, config)]
    logger.info(f"Discovered {len(resources)} resource files and {len(sources)} source files in {root}")
    return DiscoveredFiles(resource_paths=resources, source_paths=sources)


def read_text(path: str, encoding: str = "utf-8") -> str:
    """Reads contents in path"""
    try:
        with open(path, 'r', encoding=encoding) as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise UnreadableFileError(path, str(e)) from e
