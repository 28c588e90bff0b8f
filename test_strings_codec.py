#!/usr/bin/env python3
"""
Localizable core test suite

Covers parsing, canonical writing, key extraction and reconciliation without
touching a real project tree.
"""

import os
import random
import tempfile
import unittest

from key_extractor import KeyExtractor
from localizable_types import (
    CodeReferenceFile, DiagnosticKind, DuplicateKeyError, NoBaseResourceFileError,
    ResourceFile, Severity, StructuralMismatchError, UnwritableFileError
)
import reconciler
import strings_codec


class TestStringsParser(unittest.TestCase):
    """Test resource text parsing"""

    def test_parse_keeps_quotes(self):
        entries = strings_codec.parse('"B" = "Banana";\n"A" = "Apple";')
        self.assertEqual(entries, {'"A"': '"Apple"', '"B"': '"Banana"'})

    def test_statements_need_not_be_one_per_line(self):
        text = '\n\n  "A" = "1"; "B" = "2";\n"C"\n = "3";\n\n'
        entries = strings_codec.parse(text)
        self.assertEqual(set(entries), {'"A"', '"B"', '"C"'})
        self.assertEqual(entries['"C"'], '"3"')

    def test_empty_text_is_empty_mapping(self):
        self.assertEqual(strings_codec.parse(""), {})
        self.assertEqual(strings_codec.parse("\n\n   \n"), {})

    def test_value_may_contain_semicolon_and_equals(self):
        entries = strings_codec.parse('"k" = "a;b";\n"j"= "x = y";')
        self.assertEqual(entries['"k"'], '"a;b"')
        self.assertEqual(entries['"j"'], '"x = y"')

    def test_duplicate_key_fails(self):
        with self.assertRaises(DuplicateKeyError) as ctx:
            strings_codec.parse('"A" = "1";\n"A" = "2";', "en.lproj/Localizable.strings")
        self.assertEqual(ctx.exception.key, '"A"')
        self.assertEqual(ctx.exception.path, "en.lproj/Localizable.strings")

    def test_distinct_keys_with_same_value_succeed(self):
        entries = strings_codec.parse('"A" = "same";\n"B" = "same";')
        self.assertEqual(len(entries), 2)

    def test_missing_value_is_structural_mismatch(self):
        with self.assertRaises(StructuralMismatchError) as ctx:
            strings_codec.parse('"A" = "1";\n"B" = ;')
        self.assertEqual(ctx.exception.key_count, 2)
        self.assertEqual(ctx.exception.value_count, 1)

    def test_missing_semicolon_is_structural_mismatch(self):
        with self.assertRaises(StructuralMismatchError):
            strings_codec.parse('"A" = "1"')

    def test_load_resource_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "Localizable.strings")
            with open(path, "w", encoding="utf-8") as f:
                f.write('"greeting" = "Bonjour";')
            resource = strings_codec.load_resource_file(path)
        self.assertEqual(resource.path, path)
        self.assertEqual(resource.keys, frozenset({'"greeting"'}))

    def test_parse_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "Localizable.strings")
            with open(path, "w", encoding="utf-8") as f:
                f.write('"b" = "2";\n"a" = "1";\n')
            self.assertEqual(strings_codec.parse_file(path), {'"a"': '"1"', '"b"': '"2"'})

    def test_comment_without_assignment_is_rejected(self):
        with self.assertRaises(StructuralMismatchError):
            strings_codec.parse('/* "Title" */\n"A" = "1";')


class TestCanonicalWriter(unittest.TestCase):
    """Test canonical serialization and rewriting"""

    def test_serialize_sorts_without_trailing_newline(self):
        entries = strings_codec.parse('"B" = "Banana";\n"A" = "Apple";')
        self.assertEqual(strings_codec.serialize(entries), '"A" = "Apple";\n"B" = "Banana";')

    def test_serialize_empty(self):
        self.assertEqual(strings_codec.serialize({}), "")

    def test_round_trip_is_fixed_point(self):
        samples = [
            '"B" = "Banana";\n"A" = "Apple";',
            '"k" = "a;b";\n\n"j"= "x";',
            '  "Zed" = "é ü 日本";  "alpha" = "%@ items";\r\n"Alpha" = "";',
        ]
        for text in samples:
            with self.subTest(text=text):
                first = strings_codec.serialize(strings_codec.parse(text))
                second = strings_codec.serialize(strings_codec.parse(first))
                self.assertEqual(first, second)

    def test_key_starting_with_equals_survives_rewrite(self):
        entries = strings_codec.parse('"=a" = "v"; "!" = "w";')
        self.assertEqual(entries, {'"=a"': '"v"', '"!"': '"w"'})
        canonical = strings_codec.serialize(entries)
        self.assertEqual(canonical, '"!" = "w";\n"=a" = "v";')
        self.assertEqual(strings_codec.parse(canonical), entries)

    def test_random_statements_round_trip(self):
        """Any text the parser accepts re-parses to the same mapping after rewriting"""
        rng = random.Random(20181017)
        key_chars = ['a', 'Z', '=', ';', ' ', '!', '%', 'é']
        value_chars = key_chars + ['"']
        accepted = 0
        for _ in range(300):
            statements = []
            for _ in range(rng.randint(1, 4)):
                key = "".join(rng.choice(key_chars) for _ in range(rng.randint(0, 4)))
                value = "".join(rng.choice(value_chars) for _ in range(rng.randint(0, 6)))
                gap = rng.choice(['', ' ', '\t', '  '])
                statements.append(f'"{key}"{gap}= "{value}";')
            text = "".join(rng.choice(['', ' ', '\n', '\n\n  ', '\t']) + s for s in statements)

            try:
                entries = strings_codec.parse(text)
            except (StructuralMismatchError, DuplicateKeyError):
                continue
            accepted += 1
            with self.subTest(text=text):
                canonical = strings_codec.serialize(entries)
                self.assertEqual(strings_codec.parse(canonical), entries)
                self.assertEqual(strings_codec.serialize(strings_codec.parse(canonical)), canonical)
        self.assertGreater(accepted, 100)

    def test_unknown_encoding_leaves_file_untouched(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "Localizable.strings")
            with open(path, "w", encoding="utf-8") as f:
                f.write('"B" = "2";\n"A" = "1";')
            resource = strings_codec.load_resource_file(path)
            with self.assertRaises(UnwritableFileError):
                strings_codec.write_resource_file(resource, encoding="no-such-codec")

            with open(path, encoding="utf-8") as f:
                self.assertEqual(f.read(), '"B" = "2";\n"A" = "1";')
            self.assertEqual(os.listdir(tmp), ["Localizable.strings"])

    def test_write_replaces_file_contents(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "Localizable.strings")
            with open(path, "w", encoding="utf-8") as f:
                f.write('"B" = "2";\n\n\n"A" = "1";\n')
            resource = strings_codec.load_resource_file(path)
            strings_codec.write_resource_file(resource)

            with open(path, encoding="utf-8") as f:
                self.assertEqual(f.read(), '"A" = "1";\n"B" = "2";')
            self.assertEqual(os.listdir(tmp), ["Localizable.strings"])


class TestKeyExtractor(unittest.TestCase):
    """Test key extraction from source text"""

    def setUp(self):
        self.extractor = KeyExtractor()

    def test_placeholder_literals_are_excluded(self):
        source = (
            'let a = NSLocalizedString("A", comment: "Apple title")\n'
            'let b = String(format: NSLocalizedString("COUNT %d", comment: ""), 3)\n'
        )
        self.assertEqual(self.extractor.extract(source), {'"A"'})

    def test_objective_c_and_whitespace(self):
        source = (
            'label.text = NSLocalizedString(@"Title", nil);\n'
            'x = NSLocalizedString(  "Spaced", comment: "")\n'
        )
        self.assertEqual(self.extractor.extract(source), {'"Title"', '"Spaced"'})

    def test_other_placeholders(self):
        for literal in ('"Hi %@"', '"%1$@ of %2$@"', '"100%%"', '"%f km"'):
            with self.subTest(literal=literal):
                self.assertTrue(self.extractor.is_template(literal))
                self.assertEqual(self.extractor.extract(f"NSLocalizedString({literal}, comment: \"\")"), set())

    def test_length_modifiers_and_precision(self):
        source = (
            'NSLocalizedString("COUNT %ld", comment: "")\n'
            'NSLocalizedString("%.1f km", comment: "")\n'
            'NSLocalizedString("%.2f of %lu", comment: "")\n'
            'NSLocalizedString("%lld items", comment: "")\n'
            'NSLocalizedString("100% sure", comment: "")\n'
        )
        self.assertEqual(self.extractor.extract(source), {'"100% sure"'})

    def test_repeated_keys_are_distinct(self):
        source = 'NSLocalizedString("A", comment: "")\nNSLocalizedString("A", comment: "again")'
        self.assertEqual(self.extractor.extract(source), {'"A"'})

    def test_no_matches(self):
        self.assertEqual(self.extractor.extract('print("hello")'), set())

    def test_custom_lookup_functions(self):
        extractor = KeyExtractor(["L10n.tr", "NSLocalizedString"])
        source = 'L10n.tr("custom")\nNSLocalizedString("std", comment: "")'
        self.assertEqual(extractor.extract(source), {'"custom"', '"std"'})

    def test_no_lookup_functions_rejected(self):
        with self.assertRaises(ValueError):
            KeyExtractor([])


def resource(path, *keys):
    return ResourceFile(path=path, entries={f'"{k}"': '"v"' for k in keys})


def code(path, *keys):
    return CodeReferenceFile(path=path, keys={f'"{k}"' for k in keys})


class TestReconciler(unittest.TestCase):
    """Test the match, missing and dead checks"""

    def test_identical_key_sets_match(self):
        files = [resource("en", "A", "B"), resource("fr", "B", "A"), resource("de", "A", "B")]
        self.assertEqual(reconciler.match_keys(files), [])

    def test_zero_or_one_file_is_not_compared(self):
        self.assertEqual(reconciler.match_keys([]), [])
        self.assertEqual(reconciler.match_keys([resource("en", "A")]), [])

    def test_extra_key_reported_against_file_that_has_it(self):
        diagnostics = reconciler.match_keys([resource("en", "A", "B"), resource("fr", "A", "B", "C")])
        self.assertEqual(len(diagnostics), 1)
        self.assertIs(diagnostics[0].kind, DiagnosticKind.KEY_MISMATCH_ACROSS_FILES)
        self.assertEqual(diagnostics[0].path, "fr")
        self.assertEqual(diagnostics[0].keys, ('"C"',))

    def test_key_missing_from_other_file_blames_base(self):
        diagnostics = reconciler.match_keys([resource("en", "A", "B"), resource("fr", "A")])
        self.assertEqual(len(diagnostics), 1)
        self.assertEqual(diagnostics[0].path, "en")
        self.assertEqual(diagnostics[0].keys, ('"B"',))

    def test_only_first_difference_per_file(self):
        files = [resource("en", "A", "C"), resource("fr", "A", "B", "D"), resource("de", "A", "C")]
        diagnostics = reconciler.match_keys(files)
        self.assertEqual(len(diagnostics), 1)
        self.assertEqual(diagnostics[0].path, "fr")
        self.assertEqual(diagnostics[0].keys, ('"B"',))

    def test_missing_key_detected_once(self):
        diagnostics = reconciler.missing_keys([code("View.swift", "A", "E")], [resource("en", "A")])
        self.assertEqual(len(diagnostics), 1)
        self.assertIs(diagnostics[0].kind, DiagnosticKind.MISSING_KEY_IN_RESOURCE_FILE)
        self.assertEqual(diagnostics[0].path, "View.swift")
        self.assertEqual(diagnostics[0].keys, ('"E"',))
        self.assertIs(diagnostics[0].severity, Severity.ERROR)

    def test_missing_uses_base_file_only(self):
        files = [resource("en", "A"), resource("fr", "A", "E")]
        diagnostics = reconciler.missing_keys([code("View.swift", "E")], files)
        self.assertEqual([d.keys for d in diagnostics], [('"E"',)])

    def test_dead_key_warning(self):
        diagnostics = reconciler.dead_keys(
            [code("A.swift", "A"), code("B.m", "B")], [resource("en", "A", "B", "D")]
        )
        self.assertEqual(len(diagnostics), 1)
        self.assertIs(diagnostics[0].kind, DiagnosticKind.DEAD_KEY_WARNING)
        self.assertIs(diagnostics[0].severity, Severity.WARNING)
        self.assertEqual(diagnostics[0].path, "en")
        self.assertEqual(diagnostics[0].keys, ('"D"',))

    def test_all_keys_used(self):
        self.assertEqual(reconciler.dead_keys([code("A.swift", "A")], [resource("en", "A")]), [])

    def test_no_base_file_is_fatal(self):
        with self.assertRaises(NoBaseResourceFileError):
            reconciler.missing_keys([code("A.swift", "A")], [])
        with self.assertRaises(NoBaseResourceFileError):
            reconciler.dead_keys([], [])


if __name__ == '__main__':
    unittest.main()
