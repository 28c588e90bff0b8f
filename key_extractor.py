"""
Key extraction from Swift and Objective-C sources.

Finds literal keys passed to localization lookups such as
`NSLocalizedString("key", comment: "")` or `NSLocalizedString(@"key", nil)`.
Literals containing a format placeholder (%d, %ld, %.1f, %@, %1$@ ...) are
template fragments rather than keys and are skipped.
"""

import logging
import re
from typing import Iterable, Optional, Pattern, Set

from localizable_config import DEFAULT_PLACEHOLDER_PATTERN, LocalizableConfig
from localizable_discovery import read_text
from localizable_types import CodeReferenceFile


logger = logging.getLogger(__name__)


class KeyExtractor:
    """Collects referenced key tokens from source text"""

    def __init__(self, lookup_functions: Iterable[str] = ("NSLocalizedString",),
                 placeholder_pattern: Optional[Pattern] = None):
        names = "|".join(re.escape(name) for name in lookup_functions)
        if not names:
            raise ValueError("At least one lookup function is required")
        self.lookup_pattern = re.compile(rf'\b(?:{names})\(\s*@?("[^"\n]*?")')
        self.placeholder_pattern = placeholder_pattern or re.compile(DEFAULT_PLACEHOLDER_PATTERN)

    @classmethod
    def from_config(cls, config: LocalizableConfig) -> "KeyExtractor":
        return cls(config.get_lookup_functions(), config.get_placeholder_pattern())

    def is_template(self, token: str) -> bool:
        return self.placeholder_pattern.search(token) is not None

    def extract(self, text: str) -> Set[str]:
        """Distinct key tokens referenced in text, quotes included"""
        return {
            token for token in self.lookup_pattern.findall(text)
            if not self.is_template(token)
        }

    def load_code_file(self, path: str, encoding: str = "utf-8") -> CodeReferenceFile:
        keys = self.extract(read_text(path, encoding))
        logger.debug(f"Found {len(keys)} keys referenced in {path}")
        return CodeReferenceFile(path=path, keys=keys)
