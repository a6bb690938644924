"""Custom stylesheet plumbing: the include partial and the params list."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from blogcheck.exceptions import BlogcheckError
from blogcheck.filesystem.content_manager import is_external_url
from blogcheck.filesystem.site_config import write_custom_css

if TYPE_CHECKING:
    from pathlib import Path

    from blogcheck.config import Settings
    from blogcheck.filesystem.content_manager import ContentManager

logger = logging.getLogger(__name__)


def render_css_partial(param: str = "custom_css") -> str:
    """Return a template partial that links every configured stylesheet.

    Local paths go through ``relURL`` so a path-scoped base URL is applied once;
    absolute URLs pass through unchanged.
    """
    return (
        f"{{{{- range .Site.Params.{param} }}}}\n"
        '<link rel="stylesheet" href="{{ . | relURL }}">\n'
        "{{- end }}\n"
    )


def partial_exists(site_dir: Path, settings: Settings, themes: list[str] | None = None) -> bool:
    """Check the site's layouts, then each theme's, for the include partial."""
    if (site_dir / settings.partial_path).is_file():
        return True
    return any(
        (site_dir / "themes" / theme / settings.partial_path).is_file() for theme in themes or []
    )


def write_css_partial(site_dir: Path, settings: Settings, force: bool = False) -> Path:
    """Write the include partial into the site's layouts.

    Raises BlogcheckError if the file exists and ``force`` is not set.
    """
    target = site_dir / settings.partial_path
    if target.exists() and not force:
        raise BlogcheckError(f"{settings.partial_path} already exists (use --force to replace)")
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(render_css_partial(settings.css_param), encoding="utf-8")
    logger.info("Wrote stylesheet partial %s", target)
    return target


def add_stylesheet(manager: ContentManager, css_path: str) -> bool:
    """Register a stylesheet in the site configuration.

    Returns False if it was already listed. Raises BlogcheckError when a local
    path does not resolve to an asset file.
    """
    css_path = css_path.strip()
    if not css_path:
        raise BlogcheckError("Stylesheet path is empty")

    param = manager.settings.css_param
    current = manager.site_config.custom_css(param)
    if css_path in current:
        return False
    if not is_external_url(css_path) and manager.resolve_asset(css_path) is None:
        roots = ", ".join(manager.relative(r) for r in manager.asset_roots())
        raise BlogcheckError(f"Stylesheet {css_path} not found under {roots}")

    write_custom_css(manager.site_dir, [*current, css_path], param)
    manager.reload_config()
    return True
