"""Unit tests for the Rich theme."""

from whichpm.core.config import ThemeColors
from whichpm.core.theme import get_rich_theme


class TestGetRichTheme:
    """Tests for get_rich_theme function."""

    def test_default_styles(self) -> None:
        """Every style used by the renderers is defined."""
        theme = get_rich_theme()

        for name in (
            "muted",
            "manager",
            "command",
            "bold_header",
            "border",
            "confidence.high",
            "confidence.medium",
            "confidence.low",
            "confidence.uncertain",
        ):
            assert name in theme.styles

    def test_custom_colors(self) -> None:
        """Configured colors flow into the styles."""
        theme = get_rich_theme(ThemeColors(manager="#112233"))

        assert theme.styles["manager"].bold is True
        assert theme.styles["manager"].color is not None
        assert theme.styles["manager"].color.name == "#112233"
