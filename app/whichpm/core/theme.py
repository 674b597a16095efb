"""Rich theme for whichpm output.

Colors come from the ``[colors]`` table of the configuration file.
"""

from rich.theme import Theme

from whichpm.core.config import ThemeColors


def get_rich_theme(colors: ThemeColors | None = None) -> Theme:
    """Convert ThemeColors to a Rich Theme.

    Args:
        colors: Colors to convert. If None, uses the defaults.

    Returns:
        Rich Theme with one style per color plus convenience styles.
    """
    colors = colors or ThemeColors()
    styles: dict[str, str] = {
        "text": colors.text,
        "muted": colors.muted,
        "header": colors.header,
        "border": colors.border,
        "manager": f"bold {colors.manager}",
        "success": colors.success,
        "warning": colors.warning,
        "error": f"bold {colors.error}",
        "info": colors.info,
        "bold_header": f"bold {colors.header}",
        "command": f"bold {colors.text}",
        "confidence.high": colors.success,
        "confidence.medium": colors.warning,
        "confidence.low": colors.warning,
        "confidence.uncertain": colors.error,
    }
    return Theme(styles)
