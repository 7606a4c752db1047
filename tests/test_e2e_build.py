"""
End-to-end build tests

Tests the full pipeline: source tree → discover → parse → resolve → render →
output tree, including exit codes, determinism and concurrency.
"""

import hashlib
import json
import tempfile
from pathlib import Path

import pytest

from docweave.__main__ import (
    env_check,
    sources_discover,
    sources_parse,
    references_resolve,
    documents_render,
    outputs_write,
    results_report,
)
from docweave.config import appsettings
from docweave.lib import site
from docweave.lib.parser import Parser
from docweave.lib.site import jobs_resolve, tasks_run
from docweave.lib.theme import Theme
from docweave.models import ProgramState, pipeline, document_outline


STAGES = (
    env_check,
    sources_discover,
    sources_parse,
    references_resolve,
    documents_render,
    outputs_write,
    results_report,
)

SITE = {
    "index.md": """---
title: Home
---
# Welcome

Start with [[guide/install#setup|the setup]] or read the [[faq]].
""",
    "guide/install.md": """# Installation

## Setup

```sh
pip install docweave
```

::: tip
See also [[../faq#why]] and [[#setup]].
:::
""",
    "faq.md": """# FAQ

## Why?

| Question | Answer |
|----------|-------:|
| Why | [[index]] |
""",
}


def tree_write(root: Path, files: dict) -> None:
    for relative, text in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")


def tree_read(root: Path) -> dict:
    return {
        path.relative_to(root).as_posix(): path.read_bytes()
        for path in sorted(root.rglob("*"))
        if path.is_file()
    }


def build(inputdir: Path, outputdir: Path, **options) -> ProgramState:
    state = ProgramState(inputdir=inputdir, outputdir=outputdir, verbosity=0, **options)
    return pipeline(state, *STAGES)


class TestSiteBuild:
    """Test complete site builds"""

    def test_html_site(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            src, out = Path(tmpdir) / "src", Path(tmpdir) / "out"
            tree_write(src, SITE)

            state = build(src, out)

            assert sorted(tree_read(out)) == [
                "_static/theme.css",
                "faq.html",
                "guide/install.html",
                "index.html",
                "manifest.json",
            ]
            index = (out / "index.html").read_text()
            assert '<a class="xref" href="guide/install.html#setup">the setup</a>' in index
            assert '<a class="xref" href="faq.html">FAQ</a>' in index
            assert "<title>Home | Documentation</title>" in index

            install = (out / "guide/install.html").read_text()
            assert '<a class="xref" href="../faq.html#why">Why?</a>' in install
            assert '<a class="xref" href="#setup">Setup</a>' in install
            assert 'href="../_static/theme.css"' in install

            assert state.buildResult.failed == []

    def test_manifest(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            src, out = Path(tmpdir) / "src", Path(tmpdir) / "out"
            tree_write(src, SITE)
            build(src, out)

            manifest = json.loads((out / "manifest.json").read_text())
            assert manifest["format"] == "html"
            assert manifest["theme"] == "default"
            assert [page["doc_id"] for page in manifest["pages"]] == ["faq", "guide/install", "index"]
            for entry in manifest["pages"] + manifest["static"]:
                data = (out / entry["output"]).read_bytes()
                assert entry["sha256"] == hashlib.sha256(data).hexdigest()

    def test_repeated_builds_byte_identical(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            src = Path(tmpdir) / "src"
            tree_write(src, SITE)
            build(src, Path(tmpdir) / "one")
            build(src, Path(tmpdir) / "two")
            assert tree_read(Path(tmpdir) / "one") == tree_read(Path(tmpdir) / "two")

    def test_concurrent_matches_sequential(self):
        files = dict(SITE)
        for n in range(12):
            files[f"topics/t{n:02d}.md"] = (
                f"# Topic {n}\n\n## Part\n\nSee [[./t{(n + 1) % 12:02d}#part]] and [[/index]].\n\n"
                "```python\nprint('topic')\n```\n"
            )
        with tempfile.TemporaryDirectory() as tmpdir:
            src = Path(tmpdir) / "src"
            tree_write(src, files)
            build(src, Path(tmpdir) / "seq", jobs=1)
            build(src, Path(tmpdir) / "par", jobs=8)
            sequential = tree_read(Path(tmpdir) / "seq")
            assert len(sequential) == 15 + 2
            assert tree_read(Path(tmpdir) / "par") == sequential

    def test_skipped_paths(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            src, out = Path(tmpdir) / "src", Path(tmpdir) / "out"
            tree_write(src, {
                "index.md": "# Home",
                "_drafts/wip.md": "[[nowhere]]",
                ".hidden/notes.md": "```",
                "README.txt": "not a source",
            })
            build(src, out)
            assert sorted(tree_read(out)) == ["_static/theme.css", "index.html", "manifest.json"]

    def test_markup_format(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            src, out = Path(tmpdir) / "src", Path(tmpdir) / "out"
            tree_write(src, SITE)
            build(src, out, format="markup")

            assert sorted(tree_read(out)) == ["faq.md", "guide/install.md", "index.md", "manifest.json"]
            for relative, text in SITE.items():
                doc_id = relative[: -len(".md")]
                original = Parser(text, doc_id=doc_id).parse()
                formatted = Parser((out / relative).read_text(), doc_id=doc_id).parse()
                assert document_outline(formatted) == document_outline(original)

    def test_plain_theme(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            src, out = Path(tmpdir) / "src", Path(tmpdir) / "out"
            tree_write(src, SITE)
            build(src, out, theme="plain")
            assert json.loads((out / "manifest.json").read_text())["theme"] == "plain"
            assert (out / "_static/theme.css").read_bytes() == Theme("default").css_path.read_bytes()
            assert '<nav class="toc">' not in (out / "faq.html").read_text()


class TestBuildFailures:
    """Test exit codes and partial output on errors"""

    def test_unresolved_reference_writes_nothing(self, capsys):
        with tempfile.TemporaryDirectory() as tmpdir:
            src, out = Path(tmpdir) / "src", Path(tmpdir) / "out"
            tree_write(src, {
                "index.md": "# Home\n\nSee [[guide#nowhere]].",
                "guide.md": "# Guide\n\nAnd [[missing]].",
            })
            with pytest.raises(SystemExit) as excinfo:
                build(src, out)
            assert excinfo.value.code == 1
            assert not out.exists() or tree_read(out) == {}

            err = capsys.readouterr().err
            assert "index.md:3:5: unresolved reference [[guide#nowhere]]" in err
            assert "guide.md:3:5: unresolved reference [[missing]]" in err

    def test_unresolved_error_is_repeatable(self, capsys):
        with tempfile.TemporaryDirectory() as tmpdir:
            src = Path(tmpdir) / "src"
            tree_write(src, {"a.md": "[[x#y]]", "b.md": "[[z]]"})
            reports = []
            for _ in range(3):
                with pytest.raises(SystemExit):
                    build(src, Path(tmpdir) / "out", jobs=4)
                reports.append(capsys.readouterr().err)
            assert reports[0] == reports[1] == reports[2]

    def test_parse_error_fails_only_its_document(self, capsys):
        with tempfile.TemporaryDirectory() as tmpdir:
            src, out = Path(tmpdir) / "src", Path(tmpdir) / "out"
            tree_write(src, {
                "index.md": "# Home\n\nSee [[broken#part]] and [[other]].",
                "other.md": "# Other",
                "broken.md": "# Broken\n\n```python\nnever closed\n",
            })
            with pytest.raises(SystemExit) as excinfo:
                build(src, out)
            assert excinfo.value.code == 1

            written = tree_read(out)
            assert "index.html" in written
            assert "other.html" in written
            assert "broken.html" not in written

            err = capsys.readouterr().err
            assert "broken.md:3:1: unterminated code fence opened at line 3" in err
            assert "broken" in err.splitlines()[-1]

    def test_missing_source_directory(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            with pytest.raises(SystemExit) as excinfo:
                build(Path(tmpdir) / "absent", Path(tmpdir) / "out")
            assert excinfo.value.code == 1

    def test_unknown_theme(self, capsys):
        with tempfile.TemporaryDirectory() as tmpdir:
            src = Path(tmpdir) / "src"
            tree_write(src, {"index.md": "# Home"})
            with pytest.raises(SystemExit):
                build(src, Path(tmpdir) / "out", theme="no-such-theme")
            assert "no-such-theme" in capsys.readouterr().err

    def test_bad_front_matter_style_fails_only_its_document(self, capsys):
        with tempfile.TemporaryDirectory() as tmpdir:
            src, out = Path(tmpdir) / "src", Path(tmpdir) / "out"
            tree_write(src, {
                "a.md": "# A\n\n```python\nx = 1\n```\n",
                "b.md": "---\ncode:\n  pygments_style: nosuchstyle\n---\n# B\n",
            })
            with pytest.raises(SystemExit) as excinfo:
                build(src, out)
            assert excinfo.value.code == 1
            assert "a.html" in tree_read(out)
            assert "b.html" not in tree_read(out)

            err = capsys.readouterr().err
            assert "b.md:3:3: front matter code.pygments_style: unknown Pygments style 'nosuchstyle'" in err

    def test_theme_with_unknown_style(self, capsys, monkeypatch):
        with tempfile.TemporaryDirectory() as tmpdir:
            themes = Path(tmpdir) / "themes"
            (themes / "odd").mkdir(parents=True)
            (themes / "odd" / "theme.yaml").write_text("code:\n  pygments_style: nosuchstyle\n")
            monkeypatch.setattr(appsettings, "themes_dir", str(themes))

            src, out = Path(tmpdir) / "src", Path(tmpdir) / "out"
            tree_write(src, {"index.md": "# Home"})
            with pytest.raises(SystemExit) as excinfo:
                build(src, out, theme="odd")
            assert excinfo.value.code == 1
            assert not out.exists()

            err = capsys.readouterr().err
            assert "Theme 'odd' names unknown Pygments style 'nosuchstyle'" in err
            assert "Available themes: odd" in err

    def test_unlistable_directory(self, capsys, monkeypatch):
        def walk(top, onerror=None):
            onerror(PermissionError(13, "Permission denied", str(Path(top) / "private")))
            yield from ()

        with tempfile.TemporaryDirectory() as tmpdir:
            src = Path(tmpdir) / "src"
            tree_write(src, {"index.md": "# Home"})
            monkeypatch.setattr(site.os, "walk", walk)
            with pytest.raises(SystemExit) as excinfo:
                build(src, Path(tmpdir) / "out")
            assert excinfo.value.code == 1
            assert "private: Permission denied" in capsys.readouterr().err

    def test_unreadable_encoding(self, capsys):
        with tempfile.TemporaryDirectory() as tmpdir:
            src = Path(tmpdir) / "src"
            src.mkdir()
            (src / "bad.md").write_bytes(b"\xff\xfe not utf-8 \xff")
            with pytest.raises(SystemExit):
                build(src, Path(tmpdir) / "out")
            assert "bad.md" in capsys.readouterr().err


class TestConcurrencyHelpers:
    """Test the task runner"""

    def test_results_in_key_order(self):
        items = {name: name for name in ["delta", "alpha", "charlie", "bravo"]}
        results = tasks_run(str.upper, items, jobs=4)
        assert list(results) == ["alpha", "bravo", "charlie", "delta"]
        assert results["charlie"] == "CHARLIE"

    def test_first_error_in_key_order(self):
        def task(name):
            if name in ("b", "d"):
                raise ValueError(name)
            return name

        with pytest.raises(ValueError, match="b"):
            tasks_run(task, {k: k for k in "dcba"}, jobs=4)

    def test_jobs_resolve(self):
        assert jobs_resolve(3) == 3
        assert jobs_resolve(0) >= 1
        assert jobs_resolve(None) >= 1
