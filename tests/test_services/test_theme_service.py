"""Tests for the stylesheet partial and params list."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from blogcheck.config import Settings
from blogcheck.exceptions import BlogcheckError
from blogcheck.services.theme_service import (
    add_stylesheet,
    partial_exists,
    render_css_partial,
    write_css_partial,
)

if TYPE_CHECKING:
    from pathlib import Path

    from blogcheck.filesystem.content_manager import ContentManager


class TestRenderCssPartial:
    def test_ranges_over_param(self) -> None:
        partial = render_css_partial("custom_css")
        assert "{{- range .Site.Params.custom_css }}" in partial
        assert '<link rel="stylesheet" href="{{ . | relURL }}">' in partial
        assert partial.rstrip().endswith("{{- end }}")

    def test_custom_param_name(self) -> None:
        assert ".Site.Params.extra_styles" in render_css_partial("extra_styles")


class TestWriteCssPartial:
    def test_writes_into_layouts(self, tmp_path: Path) -> None:
        settings = Settings(_env_file=None)  # type: ignore[call-arg]
        target = write_css_partial(tmp_path, settings)
        assert target == tmp_path / "layouts" / "partials" / "custom_css.html"
        assert target.read_text() == render_css_partial()
        assert partial_exists(tmp_path, settings)

    def test_refuses_to_overwrite(self, tmp_site: Path, test_settings: Settings) -> None:
        with pytest.raises(BlogcheckError, match="already exists"):
            write_css_partial(tmp_site, test_settings)

    def test_force_overwrites(self, tmp_site: Path, test_settings: Settings) -> None:
        target = write_css_partial(tmp_site, test_settings, force=True)
        assert "relURL" in target.read_text()


class TestAddStylesheet:
    def test_adds_existing_asset(self, manager: ContentManager, tmp_site: Path) -> None:
        (tmp_site / "static" / "css" / "code.css").write_text("code {}\n")
        assert add_stylesheet(manager, "css/code.css") is True
        assert manager.site_config.custom_css() == ["css/custom.css", "css/code.css"]

    def test_duplicate_is_ignored(self, manager: ContentManager) -> None:
        assert add_stylesheet(manager, "css/custom.css") is False
        assert manager.site_config.custom_css() == ["css/custom.css"]

    def test_missing_asset_rejected(self, manager: ContentManager) -> None:
        with pytest.raises(BlogcheckError, match="not found"):
            add_stylesheet(manager, "css/nope.css")

    def test_external_url_accepted(self, manager: ContentManager) -> None:
        assert add_stylesheet(manager, "https://cdn.example.com/x.css") is True
        assert "https://cdn.example.com/x.css" in manager.site_config.custom_css()

    def test_base_url_preserved(self, manager: ContentManager, tmp_site: Path) -> None:
        (tmp_site / "static" / "css" / "code.css").write_text("")
        add_stylesheet(manager, "css/code.css")
        assert manager.site_config.base_url == "https://example.github.io/blog/"
