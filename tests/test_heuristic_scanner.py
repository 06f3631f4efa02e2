"""Tests for heuristic_scanner -- sampling, naming and line-length heuristics."""

from pathlib import Path

import pytest

from zipreview.services.heuristic_scanner import (
    count_lines,
    find_suspicious_identifiers,
    is_suspicious_identifier,
    scan,
    select_sample,
)


# ---------------------------------------------------------------------------
# Identifier heuristic
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("name", ["x", "_", "__", "a", "café", "my-var"])
def test_suspicious_names(name):
    assert is_suspicious_identifier(name)


@pytest.mark.parametrize("name", ["i", "j", "k", "userId", "_private", "$el", "MAX_SIZE"])
def test_acceptable_names(name):
    assert not is_suspicious_identifier(name)


def test_find_suspicious_identifiers_in_declarations():
    code = (
        "const x = 1;\n"
        "let total = 0;\n"
        "var _ = require('lodash');\n"
        "function f(a, b) { return a + b; }\n"
        "function* gen() {}\n"
        "class Q {}\n"
        "for (let i = 0; i < 3; i++) {}\n"
    )
    assert find_suspicious_identifiers(code) == {"x", "_", "f", "Q"}


def test_destructuring_and_typed_declarations():
    code = "const { a, b } = obj;\nconst n: number = 3;\nclass Box<T> {}\n"
    # destructuring is skipped; typed/generic names are cut at ':' / '<'
    assert find_suspicious_identifiers(code) == {"n"}


def test_prose_in_comments_and_strings_is_not_a_declaration():
    code = (
        "const total = 1;\n"
        "// the limit is a const value.\n"
        "const msg = 'please let me', other = 2;\n"
        "const tpl = `we let you know!`;\n"
        "/* is this a var name? */\n"
    )
    assert find_suspicious_identifiers(code) == set()


@pytest.mark.parametrize("code", ["function *g() {}", "function*g() {}", "function * g() {}"])
def test_generator_declaration_spacings(code):
    assert find_suspicious_identifiers(code) == {"g"}


def test_keyword_prefix_of_longer_word_ignored():
    assert find_suspicious_identifiers("functional x;\nconstant y;\n") == set()


def test_identifiers_only_from_declarations():
    assert find_suspicious_identifiers("x = 5;\ncall(y);\n") == set()


# ---------------------------------------------------------------------------
# Line counts
# ---------------------------------------------------------------------------


def test_count_lines_threshold_is_exclusive():
    code = "a" * 120 + "\n" + "b" * 121 + "\nshort\n"
    assert count_lines(code, 120) == (3, 1)


def test_count_lines_empty():
    assert count_lines("") == (0, 0)


# ---------------------------------------------------------------------------
# Sampling
# ---------------------------------------------------------------------------


def test_select_sample_filters_to_code_extensions():
    files = ["package.json", ".env", "a.js", "b.ts", "c.jsx", "d.tsx", "e.md"]
    assert select_sample(files) == ["a.js", "b.ts", "c.jsx", "d.tsx"]


def test_select_sample_prefers_shallow_paths_stably():
    files = ["a/b/deep.js", "top2.js", "a/mid.js", "top1.js"]
    assert select_sample(files) == ["top2.js", "top1.js", "a/mid.js", "a/b/deep.js"]


def test_select_sample_bounded_for_large_inputs():
    files = [f"src/file{n}.js" for n in range(1000)]
    assert len(select_sample(files, 20)) == 20


# ---------------------------------------------------------------------------
# scan
# ---------------------------------------------------------------------------


def test_scan_inspects_at_most_the_sample_bound(write_tree):
    root = write_tree({f"src/f{n}.js": "const ok = 1;\n" for n in range(30)})
    files = [f"src/f{n}.js" for n in range(30)]
    result = scan(root, files, sample_limit=20)
    assert len(result.analyzed_files) == 20
    assert result.readability.total_lines == 20


def test_scan_inspects_all_when_under_bound(write_tree):
    files = {f"f{n}.js": "let value = 1;\n" for n in range(5)}
    root = write_tree(files)
    result = scan(root, list(files))
    assert sorted(result.analyzed_files) == sorted(files)


def test_scan_aggregates_identifiers_and_readability(write_tree):
    root = write_tree({
        "a.js": "const x = 1;\n" + "y".ljust(130, "y") + "\n",
        "lib/b.ts": "const x = 2;\nlet z = 3;\n",
        "package.json": '{"name": "ignored"}',
    })
    result = scan(root, ["a.js", "lib/b.ts", "package.json"])
    assert result.identifiers == {"x", "z"}
    assert result.readability.total_lines == 4
    assert result.readability.long_lines == 1
    assert result.analyzed_files == ["a.js", "lib/b.ts"]


def test_scan_skips_unreadable_file(write_tree, monkeypatch):
    root = write_tree({"good.js": "const x = 1;\n", "bad.js": "const y = 2;\n"})
    real_read_text = Path.read_text

    def flaky_read_text(self, *args, **kwargs):
        if self.name == "bad.js":
            raise PermissionError(13, "Permission denied")
        return real_read_text(self, *args, **kwargs)

    monkeypatch.setattr(Path, "read_text", flaky_read_text)
    result = scan(root, ["bad.js", "good.js"])
    assert result.analyzed_files == ["good.js"]
    assert result.identifiers == {"x"}


def test_scan_skips_missing_file(write_tree):
    root = write_tree({"real.js": "let ok = 1;\n"})
    result = scan(root, ["ghost.js", "real.js"])
    assert result.analyzed_files == ["real.js"]


def test_scan_is_read_only(write_tree):
    root = write_tree({"a.js": "const x = 1;\n"})
    before = {p: p.read_bytes() for p in root.rglob("*") if p.is_file()}
    scan(root, ["a.js"])
    after = {p: p.read_bytes() for p in root.rglob("*") if p.is_file()}
    assert before == after
