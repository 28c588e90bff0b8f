"""
Localizable.strings codec

Parses the `"key" = "value";` statement format into a key/value mapping and
writes mappings back out in canonical, sorted form. Tokens keep their
surrounding quotes and are never unescaped, so parse -> serialize is lossless
for anything the parser accepts.
"""

import logging
import os
import re
import tempfile
from typing import Dict, Mapping

from localizable_discovery import read_text
from localizable_types import (
    DuplicateKeyError, ResourceFile, StructuralMismatchError, UnwritableFileError
)


NEWLINES_RE = re.compile(r"[\r\n]+")
STATEMENT_RE = re.compile(r'\s*("[^"]*")\s*= (".*?");')
# Loose token scans, only used to describe what a malformed remainder holds
KEY_RE = re.compile(r'"[^"]*"(?=\s*=)')
VALUE_RE = re.compile(r'(?<== )".*?"(?=;)')

logger = logging.getLogger(__name__)


def parse(text: str, path: str = "<string>") -> Dict[str, str]:
    """
    Parse resource text into {key token: value token}.

    Statements are read back to back from the start of the text; each key is
    paired with the value of its own statement. Raises StructuralMismatchError
    when anything other than whitespace is left over (comments, a missing
    value or semicolon) and DuplicateKeyError on the first repeated key.
    """
    trimmed = NEWLINES_RE.sub("", text).strip()

    pairs = []
    pos = 0
    while pos < len(trimmed):
        match = STATEMENT_RE.match(trimmed, pos)
        if match is None:
            break
        pairs.append(match.groups())
        pos = match.end()

    rest = trimmed[pos:]
    if rest.strip():
        raise StructuralMismatchError(
            path,
            len(pairs) + len(KEY_RE.findall(rest)),
            len(pairs) + len(VALUE_RE.findall(rest)),
        )

    entries: Dict[str, str] = {}
    for key, value in pairs:
        if key in entries:
            raise DuplicateKeyError(key, path)
        entries[key] = value
    return entries


def parse_file(path: str, encoding: str = "utf-8") -> Dict[str, str]:
    return parse(read_text(path, encoding), path)


def load_resource_file(path: str, encoding: str = "utf-8") -> ResourceFile:
    entries = parse_file(path, encoding)
    logger.debug(f"Parsed {len(entries)} entries from {path}")
    return ResourceFile(path=path, entries=entries)


def serialize(entries: Mapping[str, str]) -> str:
    """Sorted `key = value;` lines joined by newlines, no trailing newline"""
    return "\n".join(f"{key} = {entries[key]};" for key in sorted(entries))


def write_resource_file(resource: ResourceFile, encoding: str = "utf-8"):
    """Atomically replace the file at resource.path with its canonical form"""
    content = serialize(resource.entries)
    directory = os.path.dirname(os.path.abspath(resource.path))
    try:
        fd, tmp_path = tempfile.mkstemp(prefix=".localizable-", dir=directory)
        os.close(fd)
    except OSError as e:
        raise UnwritableFileError(resource.path, str(e)) from e
    try:
        with open(tmp_path, 'w', encoding=encoding, newline="") as f:
            f.write(content)
        if os.path.exists(resource.path):
            os.chmod(tmp_path, os.stat(resource.path).st_mode & 0o7777)
        os.replace(tmp_path, resource.path)
    except (OSError, UnicodeError, LookupError) as e:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise UnwritableFileError(resource.path, str(e)) from e
    logger.debug(f"Wrote {len(resource)} entries to {resource.path}")
