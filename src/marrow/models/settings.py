"""Data models for persisted per-extension view settings."""

from pydantic import BaseModel, Field


class ViewSettings(BaseModel):
    """Presentation settings remembered for one file extension.

    Attributes:
        window_width: Content width in logical pixels (TOC excluded)
        window_height: Window height in logical pixels
        toc_visible: Whether the TOC sidebar is shown
        view_mode: Active view ("github", "terminal", ...)
        font_size_level: Zoom steps relative to the default font size
        theme: Colour theme name
    """

    window_width: float = 800.0
    window_height: float = 900.0
    toc_visible: bool = True
    view_mode: str = "github"
    font_size_level: int = 0
    theme: str = "dark"


class AllSettings(BaseModel):
    """Settings for every extension seen so far, plus the fallback."""

    default: ViewSettings = Field(default_factory=ViewSettings)
    extensions: dict[str, ViewSettings] = Field(default_factory=dict)

    def get_for_extension(self, ext: str) -> ViewSettings:
        """Settings for an extension, or the defaults if none were saved."""
        return self.extensions.get(ext, self.default)

    def set_for_extension(self, ext: str, settings: ViewSettings) -> None:
        """Remember settings for an extension."""
        self.extensions[ext] = settings
