"""Tool configuration loaded from environment variables."""

from __future__ import annotations

from pathlib import Path

import pendulum
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """blogcheck settings.

    Every field can be set through a ``BLOGCHECK_``-prefixed environment variable or a
    ``.env`` file; CLI flags override them per invocation.
    """

    model_config = SettingsConfigDict(
        env_prefix="BLOGCHECK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    debug: bool = False

    # Site layout
    site_dir: Path = Path(".")
    posts_section: str = Field(default="posts", min_length=1)
    asset_dirs: list[str] = Field(default_factory=lambda: ["static", "assets"])

    # Theme
    css_param: str = Field(default="custom_css", min_length=1)
    css_partial: str = Field(default="custom_css.html", pattern=r"^[\w.-]+\.html$")

    # Dates
    timezone: str = "UTC"
    allow_future_posts: bool = False

    @field_validator("posts_section")
    @classmethod
    def _strip_section_slashes(cls, value: str) -> str:
        stripped = value.strip("/")
        if not stripped:
            raise ValueError("posts_section must name a directory")
        return stripped

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        pendulum.timezone(value)
        return value

    @property
    def partial_path(self) -> Path:
        """Location of the stylesheet include partial relative to the site directory."""
        return Path("layouts") / "partials" / self.css_partial
