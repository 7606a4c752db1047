"""
Theme, lexer and settings tests

Tests theme loading with extends chains, the bundled Pygments lexer for the
markup dialect, and environment-driven settings.
"""

import tempfile
from pathlib import Path

import pytest
from pygments.lexers import TextLexer
from pygments.token import Generic, Name, String

from docweave.config import AppSettings
from docweave.lib.elements import ElementRegistry, lexer_get
from docweave.lib.lexer import DocweaveLexer, get_lexer
from docweave.lib.theme import Theme, ThemeError, config_mergeDeep, theme_validate, themes_listAvailable
from docweave.models.elements import ElementCategory


def theme_write(root: Path, name: str, yaml_text: str, css: str = None) -> None:
    theme_dir = root / name
    theme_dir.mkdir(parents=True)
    (theme_dir / "theme.yaml").write_text(yaml_text)
    if css is not None:
        (theme_dir / "theme.css").write_text(css)


class TestThemes:
    """Test theme loading"""

    def test_default_theme(self):
        theme = Theme("default")
        assert theme.config_get("site.title") == "Documentation"
        assert theme.config_get("toc.depth") == 3
        assert theme.pygmentsStyle_get() == "friendly"
        assert theme.css_has()

    def test_plain_extends_default(self):
        theme = Theme("plain")
        assert theme.parent is not None and theme.parent.name == "default"
        assert theme.config_get("toc.show") is False
        assert theme.config_get("site.title") == "Documentation"
        assert theme.cssPath_get() == Theme("default").css_path

    def test_missing_theme(self):
        with pytest.raises(ThemeError):
            Theme("no-such-theme")

    def test_config_get_default(self):
        assert Theme("default").config_get("nothing.here", "fallback") == "fallback"

    def test_circular_extends(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            theme_write(root, "a", "extends: b\n")
            theme_write(root, "b", "extends: a\n")
            with pytest.raises(ThemeError, match="circular"):
                Theme("a", str(root))

    def test_malformed_yaml(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            theme_write(root, "bad", "site: [unclosed\n")
            with pytest.raises(ThemeError):
                Theme("bad", str(root))

    def test_list_and_validate(self):
        assert {"default", "plain"} <= set(themes_listAvailable())
        ok, message = theme_validate("default")
        assert ok, message

    def test_validate_unknown_style(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            theme_write(root, "odd", "code:\n  pygments_style: no-such-style\n", css="body {}")
            ok, message = theme_validate("odd", str(root))
            assert not ok
            assert "no-such-style" in message

    @pytest.mark.parametrize("depth", ["deep", "0", "7", "true"])
    def test_validate_bad_toc_depth(self, depth):
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            theme_write(root, "odd", f"toc:\n  depth: {depth}\n", css="body {}")
            with pytest.raises(ThemeError, match="toc.depth"):
                Theme("odd", str(root)).config_validate()
            assert not theme_validate("odd", str(root))[0]

    def test_validate_without_css(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            theme_write(root, "bare", "site:\n  title: Bare\n")
            ok, message = theme_validate("bare", str(root))
            assert ok
            assert message == "Theme 'bare' is valid (no theme.css)"

    def test_merge_deep(self):
        merged = config_mergeDeep({"toc": {"show": True, "depth": 3}, "a": 1}, {"toc": {"depth": 2}})
        assert merged == {"toc": {"show": True, "depth": 2}, "a": 1}


class TestLexer:
    """Test the docweave Pygments lexer"""

    def tokens(self, text: str) -> list:
        return list(get_lexer().get_tokens(text))

    def test_heading_and_anchor(self):
        tokens = self.tokens("## Install {#install}\n")
        assert (Generic.Heading, "## Install") in tokens
        assert (Name.Label, " {#install}") in tokens

    def test_crossref(self):
        assert (Name.Tag, "[[faq#why]]") in self.tokens("See [[faq#why]].\n")

    def test_fence_body_is_literal(self):
        tokens = self.tokens("```python\nx = **1**\n```\n")
        assert (String, "x = **1**\n") in tokens

    def test_lexer_lookup(self):
        assert isinstance(lexer_get("dw"), DocweaveLexer)
        assert isinstance(lexer_get("Docweave"), DocweaveLexer)
        assert isinstance(lexer_get("no-such-language"), TextLexer)
        assert lexer_get("python").name == "Python"


class TestRegistry:
    """Test the element registry"""

    def test_every_block_kind_has_handler(self):
        registry = ElementRegistry()
        for kind in ("heading", "paragraph", "code", "table", "list", "admonition"):
            assert registry.get(kind) is not None
        for kind in ("text", "code_span", "emphasis", "strong", "link", "xref"):
            assert registry.get(kind) is not None

    def test_admonition_aliases(self):
        registry = ElementRegistry()
        assert registry.admonition_get("WARN").name == "warning"
        assert registry.admonition_get("summary").name == "info"
        assert registry.admonition_get("paragraph") is None
        assert registry.admonition_get("bogus") is None

    def test_list_by_category(self):
        registry = ElementRegistry()
        names = [spec.name for spec in registry.elements_listByCategory(ElementCategory.ADMONITION)]
        assert names == ["note", "info", "tip", "important", "warning", "danger"]


class TestSettings:
    """Test pydantic settings"""

    def test_defaults(self):
        settings = AppSettings()
        assert settings.source_suffix == ".md"
        assert settings.html_suffix == ".html"
        assert settings.strict_admonitions is True

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("DOCWEAVE_SOURCE_SUFFIX", ".txt")
        monkeypatch.setenv("DOCWEAVE_DEFAULT_JOBS", "3")
        settings = AppSettings()
        assert settings.source_suffix == ".txt"
        assert settings.default_jobs == 3

    def test_skipped_paths(self):
        settings = AppSettings()
        assert settings.pathSkipped_check(Path("_drafts/a.md"))
        assert settings.pathSkipped_check(Path("guide/.hidden.md"))
        assert not settings.pathSkipped_check(Path("guide/install.md"))

    def test_themes_dir(self):
        assert (AppSettings().themesDir_resolve() / "default" / "theme.yaml").is_file()
