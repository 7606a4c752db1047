"""
Application settings and configuration

Uses pydantic-settings for type-safe configuration via environment variables.
All settings use DOCWEAVE_ prefix (e.g., DOCWEAVE_DEFAULT_JOBS=4).

Settings can also be loaded from a .env file in the project root.
"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """
    Application configuration via environment variables.

    Environment variables use DOCWEAVE_ prefix.

    Examples:
        DOCWEAVE_SOURCE_SUFFIX=.txt
        DOCWEAVE_DEFAULT_THEME=plain
        DOCWEAVE_STRICT_ADMONITIONS=false
    """

    model_config = SettingsConfigDict(
        env_prefix="DOCWEAVE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Source tree configuration
    source_suffix: str = Field(
        default=".md",
        description="File suffix identifying markup sources in the input tree",
    )

    skip_prefixes: str = Field(
        default="._",
        description="Path components starting with any of these characters are not sources",
    )

    # Output configuration
    html_suffix: str = Field(
        default=".html",
        description="File suffix of rendered HTML pages",
    )

    static_dir: str = Field(
        default="_static",
        description="Output subdirectory receiving theme CSS",
    )

    manifest_name: str = Field(
        default="manifest.json",
        description="Name of the build manifest written to the output root",
    )

    # Theme configuration
    default_theme: str = Field(
        default="default",
        description="Theme used when --theme is not given",
    )

    themes_dir: str = Field(
        default="",
        description="Directory holding theme folders (empty means the packaged themes)",
    )

    # Parser configuration
    strict_admonitions: bool = Field(
        default=True,
        description="Unknown admonition kinds are parse errors (otherwise rendered as notes)",
    )

    slug_max_length: int = Field(
        default=60,
        description="Maximum length of automatically generated heading anchors",
    )

    # Build configuration
    default_jobs: int = Field(
        default=0,
        description="Worker threads for parse/render (0 means one per CPU)",
    )

    def themesDir_resolve(self) -> Path:
        """
        Directory that holds theme folders.

        Returns:
            themes_dir when configured, else the themes/ folder shipped
            inside the package

        Example:
            >>> AppSettings().themesDir_resolve().name
            'themes'
        """
        if self.themes_dir:
            return Path(self.themes_dir)
        return Path(__file__).parent.parent / "themes"

    def pathSkipped_check(self, relative: Path) -> bool:
        """
        Check whether a source-relative path lies in a skipped location.

        Args:
            relative: Path relative to the source root

        Returns:
            True if any component starts with one of skip_prefixes

        Example:
            >>> AppSettings().pathSkipped_check(Path('_drafts/a.md'))
            True
        """
        if not self.skip_prefixes:
            return False
        return any(part[:1] in self.skip_prefixes for part in relative.parts)


# Singleton instance - import this in your code
appsettings = AppSettings()
