"""Theme domain — built-in themes, the theme service and style scopes."""

from qulome.themes.defaults import DEFAULT_STYLES, DEFAULT_THEME_ID, builtin_themes
from qulome.themes.services import RootStyleScope, StyleScope, ThemeListener, ThemeService

__all__ = [
    "DEFAULT_STYLES",
    "DEFAULT_THEME_ID",
    "RootStyleScope",
    "StyleScope",
    "ThemeListener",
    "ThemeService",
    "builtin_themes",
]
