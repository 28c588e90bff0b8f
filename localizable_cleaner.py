#!/usr/bin/env python3
"""
Localizable.strings Cleanup Service

Main orchestrator that parses every Localizable.strings file, checks they
define the same keys, rewrites them sorted and deduplicated, then checks the
Swift / Objective-C sources for missing and unused keys.

Usage:
  python3 localizable_cleaner.py [project-root] [--dry-run] [--json]
"""

import json
import logging
import sys
from typing import List, Optional

from pubsub import pub

from key_extractor import KeyExtractor
from localizable_config import LocalizableConfig
from localizable_discovery import discover_files
from localizable_types import (
    COMPLETION_MARKER, TOPIC_DIAGNOSTIC, TOPIC_FINISHED, CodeReferenceFile, Diagnostic,
    DiscoveredFiles, LocalizableError, ReconciliationReport, ResourceFile, Severity
)
import reconciler
import strings_codec


class LocalizableCleaner:
    """Runs the parse -> match -> rewrite -> extract -> missing -> dead pipeline"""

    def __init__(self, config: Optional[LocalizableConfig] = None, publisher=pub):
        self.config = config or LocalizableConfig()
        self.publisher = publisher
        self.extractor = KeyExtractor.from_config(self.config)
        self.logger = logging.getLogger(__name__)

    def run(self, discovered: DiscoveredFiles) -> ReconciliationReport:
        """
        Execute one cleanup run over the discovered files.

        Fatal conditions raise LocalizableError before any later stage runs,
        so a single malformed resource file blocks every rewrite. Diagnostics
        are published as they are found and returned in the report; they
        never abort the run.
        """
        report = ReconciliationReport()
        encoding = self.config.get_encoding()

        resource_files = self.parse_resources(discovered.resource_paths, encoding)
        report.resource_files.extend(resource_files)

        self._emit(report, reconciler.match_keys(resource_files))

        if self.config.is_write_enabled():
            report.rewritten_paths.extend(self.rewrite_resources(resource_files, encoding))
        else:
            self.logger.info("Write disabled, leaving resource files untouched")

        code_files = self.extract_references(discovered.source_paths, encoding)
        report.code_files.extend(code_files)

        self._emit(report, reconciler.missing_keys(code_files, resource_files))
        self._emit(report, reconciler.dead_keys(code_files, resource_files))

        self.logger.info(f"Cleanup finished: {report.summary()}")
        self.publisher.sendMessage(TOPIC_FINISHED, report=report)
        return report

    def parse_resources(self, paths, encoding: str) -> List[ResourceFile]:
        files = [strings_codec.load_resource_file(path, encoding) for path in paths]
        self.logger.info(f"Parsed {len(files)} resource files")
        return files

    def rewrite_resources(self, files: List[ResourceFile], encoding: str) -> List[str]:
        for resource in files:
            strings_codec.write_resource_file(resource, encoding)
        self.logger.info(f"Rewrote {len(files)} resource files")
        return [f.path for f in files]

    def extract_references(self, paths, encoding: str) -> List[CodeReferenceFile]:
        files = [self.extractor.load_code_file(path, encoding) for path in paths]
        self.logger.info(f"Scanned {len(files)} source files for localized keys")
        return files

    def _emit(self, report: ReconciliationReport, diagnostics: List[Diagnostic]):
        for diagnostic in diagnostics:
            report.add(diagnostic)
            self.publisher.sendMessage(TOPIC_DIAGNOSTIC, diagnostic=diagnostic)


class ConsoleReporter:
    """Prints diagnostics and the completion marker as they are published"""

    def __init__(self, stream=None, publisher=pub):
        self.stream = stream or sys.stdout
        self.publisher = publisher
        self.publisher.subscribe(self.on_diagnostic, TOPIC_DIAGNOSTIC)
        self.publisher.subscribe(self.on_finished, TOPIC_FINISHED)

    def on_diagnostic(self, diagnostic):
        prefix = "error" if diagnostic.severity is Severity.ERROR else "warning"
        print(f"{prefix}: {diagnostic.message()}", file=self.stream)

    def on_finished(self, report):
        print(COMPLETION_MARKER, file=self.stream)

    def close(self):
        self.publisher.unsubscribe(self.on_diagnostic, TOPIC_DIAGNOSTIC)
        self.publisher.unsubscribe(self.on_finished, TOPIC_FINISHED)


def main(argv=None) -> int:
    """Command line interface"""
    import argparse

    parser = argparse.ArgumentParser(description="Clean and audit Localizable.strings files")
    parser.add_argument('root', nargs='?', default='.', help='Project directory to scan')
    parser.add_argument('--config', metavar='PATH', help='JSON configuration file')
    parser.add_argument('--dry-run', action='store_true', help='Check only, do not rewrite files')
    parser.add_argument('--json', action='store_true', help='Print the report as JSON')
    parser.add_argument('--init-config', action='store_true', help='Write the effective configuration and exit')
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument('--debug', action='store_true', help='Enable debug logging')
    verbosity.add_argument('--quiet', action='store_true', help='Only log warnings and errors')

    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)
    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)
    elif args.quiet:
        logging.getLogger().setLevel(logging.WARNING)
    logger = logging.getLogger(__name__)

    reporter = None
    try:
        config = LocalizableConfig(args.config, must_exist=not args.init_config)
        if args.init_config:
            config.save_config()
            return 0
        if args.dry_run:
            config.set_write_enabled(False)

        discovered = discover_files(args.root, config)
        reporter = ConsoleReporter(stream=sys.stderr if args.json else sys.stdout)
        report = LocalizableCleaner(config).run(discovered)
    except LocalizableError as e:
        logger.error(str(e))
        return 1
    finally:
        if reporter is not None:
            reporter.close()

    if args.json:
        print(json.dumps(report.to_dict(), indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
