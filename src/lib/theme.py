"""
Theme loader and manager for docweave sites.

Themes provide visual styling and page options for rendered documentation.
Each theme is a directory containing:
  - theme.yaml: Configuration (site title, code style, toc, footer)
  - theme.css: Optional stylesheet, copied to <output>/_static/theme.css

A theme may name a parent with ``extends: <theme>``; its configuration is
merged over the parent's, and it inherits the parent's CSS when it has none.
"""

import yaml
from pathlib import Path
from typing import Dict, Any, List, Optional

from pygments.styles import get_style_by_name
from pygments.util import ClassNotFound

from ..config import appsettings


class ThemeError(Exception):
    """Raised when theme loading or validation fails"""
    pass


def pygmentsStyle_check(style: Any) -> bool:
    """True when style names an installed Pygments style"""
    if not isinstance(style, str) or not style:
        return False
    try:
        get_style_by_name(style)
    except ClassNotFound:
        return False
    return True


def tocDepth_check(depth: Any) -> bool:
    """True for an integer heading level 1..6 (booleans excluded)"""
    return isinstance(depth, int) and not isinstance(depth, bool) and 1 <= depth <= 6


def config_mergeDeep(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merge two configuration mappings; nested mappings merge key by key

    Example:
        >>> config_mergeDeep({'toc': {'show': True, 'depth': 3}}, {'toc': {'depth': 2}})
        {'toc': {'show': True, 'depth': 2}}
    """
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = config_mergeDeep(merged[key], value)
        else:
            merged[key] = value
    return merged


class Theme:
    """
    Represents a docweave theme.

    A theme consists of:
      - Configuration from theme.yaml (merged over its parent's, if any)
      - CSS from theme.css (or the nearest ancestor's)
    """

    def __init__(self, theme_name: str, themes_dir: Optional[str] = None, _chain: Optional[List[str]] = None):
        """
        Load a theme by name.

        Args:
            theme_name: Name of the theme directory (e.g., "default", "plain")
            themes_dir: Path to themes directory (default: packaged themes)

        Raises:
            ThemeError: If theme directory or required files don't exist, or
                        the extends chain is circular
        """
        self.name = theme_name
        self.themes_dir = Path(themes_dir) if themes_dir else appsettings.themesDir_resolve()
        self.theme_dir = self.themes_dir / theme_name

        # Validate theme directory exists
        if not self.theme_dir.is_dir():
            raise ThemeError(
                f"Theme '{theme_name}' not found. "
                f"Expected directory: {self.theme_dir}"
            )

        # Load configuration
        self.config_path = self.theme_dir / "theme.yaml"
        if not self.config_path.exists():
            raise ThemeError(
                f"Theme '{theme_name}' missing theme.yaml"
            )

        own_config = self._config_load()

        # Resolve parent theme
        chain = (_chain or []) + [theme_name]
        self.parent: Optional[Theme] = None
        parent_name = own_config.pop('extends', None)
        if parent_name:
            if parent_name in chain:
                raise ThemeError(
                    f"Theme '{theme_name}' has a circular extends chain: {' -> '.join(chain + [parent_name])}"
                )
            self.parent = Theme(parent_name, str(self.themes_dir), _chain=chain)
            self.config = config_mergeDeep(self.parent.config, own_config)
        else:
            self.config = own_config

        self.css_path = self.theme_dir / "theme.css"

    def _config_load(self) -> Dict[str, Any]:
        """Load and parse theme.yaml"""
        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                config: Any = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ThemeError(f"Failed to parse theme.yaml of '{self.name}': {e}")
        except OSError as e:
            raise ThemeError(f"Failed to load theme.yaml of '{self.name}': {e}")

        if config is None:
            config = {}
        if not isinstance(config, dict):
            raise ThemeError(f"theme.yaml of '{self.name}' must be a mapping")
        return config

    def css_has(self) -> bool:
        """Check if theme (or an ancestor) has a CSS file"""
        return self.cssPath_get() is not None

    def cssPath_get(self) -> Optional[Path]:
        """Get path to the effective theme CSS file, or None if there is none"""
        if self.css_path.exists():
            return self.css_path
        if self.parent is not None:
            return self.parent.cssPath_get()
        return None

    def config_get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value from theme.yaml.

        Supports nested keys with dot notation:
          theme.config_get('toc.depth', 3)

        Args:
            key: Configuration key (supports dot notation)
            default: Default value if key doesn't exist

        Returns:
            Configuration value or default
        """
        keys: list[str] = key.split('.')
        value: Any = self.config

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def pygmentsStyle_get(self) -> str:
        """
        Get Pygments style name for syntax highlighting.

        Returns:
            Pygments style name (default: 'default')
        """
        return self.config_get('code.pygments_style', 'default')

    def config_validate(self) -> None:
        """
        Check the configuration values pages depend on at render time.

        Raises:
            ThemeError: code.pygments_style names no installed Pygments
                        style, or toc.depth is not an integer from 1 to 6
        """
        style = self.pygmentsStyle_get()
        if not pygmentsStyle_check(style):
            raise ThemeError(f"Theme '{self.name}' names unknown Pygments style '{style}'")
        if not tocDepth_check(self.config_get('toc.depth', 3)):
            raise ThemeError(f"Theme '{self.name}': toc.depth must be an integer from 1 to 6")

    def __repr__(self) -> str:
        return f"Theme(name='{self.name}', path='{self.theme_dir}')"


def themes_listAvailable(themes_dir: Optional[str] = None) -> list[str]:
    """
    List all available theme names.

    Args:
        themes_dir: Path to themes directory (default: packaged themes)

    Returns:
        List of theme names (directory names with valid theme.yaml)
    """
    themes_path: Path = Path(themes_dir) if themes_dir else appsettings.themesDir_resolve()

    if not themes_path.exists():
        return []

    themes: list[str] = []
    for item in themes_path.iterdir():
        if item.is_dir():
            # Check if it has a theme.yaml
            if (item / "theme.yaml").exists():
                themes.append(item.name)

    return sorted(themes)


def theme_validate(theme_name: str, themes_dir: Optional[str] = None) -> tuple[bool, str]:
    """
    Validate a theme's structure and configuration.

    Args:
        theme_name: Name of theme to validate
        themes_dir: Path to themes directory

    Returns:
        Tuple of (is_valid, message)
    """
    try:
        theme: Theme = Theme(theme_name, themes_dir)
        theme.config_validate()
    except ThemeError as e:
        return False, str(e)

    # A stylesheet is optional; pages then carry no <link>
    if not theme.css_has():
        return True, f"Theme '{theme_name}' is valid (no theme.css)"
    return True, f"Theme '{theme_name}' is valid"
