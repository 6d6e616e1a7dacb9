"""Built-in themes.

Variable names are the contract with the article stylesheet; the values
are presentation choices.
"""

from __future__ import annotations

from qulome.content.models import Theme

DEFAULT_THEME_ID = "default-1"

DEFAULT_STYLES: dict[str, str] = {
    # headings
    "--h1-font-size": "24px",
    "--h1-color": "#1F2937",
    "--h1-font-weight": "bold",
    "--h1-text-align": "left",
    "--h2-font-size": "20px",
    "--h2-color": "#1F2937",
    "--h2-font-weight": "bold",
    "--h2-text-align": "left",
    "--h3-font-size": "18px",
    "--h3-color": "#1F2937",
    "--h3-font-weight": "bold",
    "--h3-text-align": "left",
    # body text
    "--p-font-family": "sans-serif",
    "--p-font-size": "16px",
    "--p-color": "#374151",
    "--p-line-height": "1.7",
    "--p-margin-bottom": "20px",
    "--p-text-align": "justify",
    # inline
    "--a-color": "#4338CA",
    "--a-hover-color": "#312E81",
    "--strong-color": "#4338CA",
    "--em-color": "#4338CA",
    "--code-bg": "#E5E7EB",
    "--code-color": "#BE123C",
    # blocks
    "--blockquote-bg": "#F3F4F6",
    "--blockquote-border-color": "#D1D5DB",
    "--blockquote-padding": "15px 20px",
    "--blockquote-color": "#4B5563",
    "--code-block-bg": "#111827",
    "--code-block-color": "#E5E7EB",
    "--code-block-padding": "15px",
    "--code-block-border-radius": "6px",
    "--ul-list-style": "disc",
    "--ol-list-style": "decimal",
    "--list-pl": "30px",
    # rules
    "--hr-color": "#D1D5DB",
    "--hr-height": "1px",
    "--hr-margin": "30px 0",
}

NIGHT_SKY_STYLES: dict[str, str] = {
    **DEFAULT_STYLES,
    "--h1-font-size": "26px",
    "--h1-color": "#0E2A73",
    "--h2-font-size": "22px",
    "--h2-color": "#0E2A73",
    "--h3-font-size": "19px",
    "--h3-color": "#0E2A73",
    "--p-font-family": '"Heiti SC", "Microsoft YaHei", sans-serif',
    "--p-font-size": "17px",
    "--p-color": "#333333",
    "--p-line-height": "1.8",
    "--p-margin-bottom": "22px",
    "--a-color": "#0E2A73",
    "--a-hover-color": "#2C4BA3",
    "--strong-color": "#E0A26F",
    "--em-color": "#E0A26F",
    "--code-bg": "#F0F0F0",
    "--code-color": "#333",
    "--blockquote-bg": "#F8F9FA",
    "--blockquote-border-color": "#0E2A73",
    "--blockquote-color": "#333333",
    "--code-block-bg": "#0A1D4E",
    "--code-block-color": "#F8F9FA",
    "--ul-list-style": "square",
    "--hr-color": "#0E2A73",
    "--hr-height": "2px",
}


def builtin_themes() -> list[Theme]:
    """Fresh copies of the shipped themes; only the first is seeded."""
    return [
        Theme(
            id=DEFAULT_THEME_ID,
            name="默认主题",
            is_system_theme=True,
            styles=dict(DEFAULT_STYLES),
        ),
        Theme(
            id="default-2",
            name="夜空",
            is_system_theme=True,
            styles=dict(NIGHT_SKY_STYLES),
        ),
    ]
