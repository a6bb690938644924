"""Site configuration reader/writer for hugo.toml / config.toml and their YAML forms."""

from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import pendulum
import tomli_w
import yaml

from blogcheck.exceptions import SiteConfigError

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

# Lookup order used by the generator itself
CONFIG_FILENAMES: tuple[str, ...] = (
    "hugo.toml",
    "hugo.yaml",
    "hugo.yml",
    "config.toml",
    "config.yaml",
    "config.yml",
)


@dataclass
class SiteConfig:
    """Parsed site configuration."""

    base_url: str = ""
    title: str = ""
    theme: list[str] = field(default_factory=list)
    content_dir: str = "content"
    time_zone: str | None = None
    params: dict[str, Any] = field(default_factory=dict)
    path: Path | None = None

    def param(self, key: str) -> Any:
        """Look up a ``params`` entry; keys are case-insensitive."""
        wanted = key.lower()
        for name, value in self.params.items():
            if name.lower() == wanted:
                return value
        return None

    def custom_css(self, key: str = "custom_css") -> list[str]:
        """Return the configured stylesheet paths.

        Raises SiteConfigError if the entry is neither a string nor a list of strings.
        """
        raw = self.param(key)
        if raw is None:
            return []
        if isinstance(raw, str):
            return [raw]
        if isinstance(raw, list) and all(isinstance(item, str) for item in raw):
            return list(raw)
        msg = f"params.{key} must be a string or a list of strings, got {raw!r}"
        raise SiteConfigError(msg)


def find_config_file(site_dir: Path) -> Path | None:
    """Return the first existing config file in lookup order."""
    for name in CONFIG_FILENAMES:
        candidate = site_dir / name
        if candidate.is_file():
            return candidate
    return None


def _load_mapping(config_path: Path) -> dict[str, Any]:
    text = config_path.read_text(encoding="utf-8")
    try:
        if config_path.suffix == ".toml":
            data: Any = tomllib.loads(text)
        else:
            data = yaml.safe_load(text) or {}
    except (tomllib.TOMLDecodeError, yaml.YAMLError) as exc:
        raise SiteConfigError(f"Cannot parse {config_path.name}: {exc}") from exc
    if not isinstance(data, dict):
        raise SiteConfigError(f"{config_path.name} must contain a mapping at the top level")
    return data


def _get_ci(data: dict[str, Any], key: str, default: Any = None) -> Any:
    """Case-insensitive top-level lookup (baseURL, baseurl and BaseURL are the same key)."""
    wanted = key.lower()
    for name, value in data.items():
        if str(name).lower() == wanted:
            return value
    return default


def parse_site_config(site_dir: Path) -> SiteConfig:
    """Parse the site configuration file from the site directory.

    Returns a default SiteConfig (with ``path=None``) when no config file exists.
    """
    config_path = find_config_file(site_dir)
    if config_path is None:
        logger.debug("No site configuration found in %s", site_dir)
        return SiteConfig()

    data = _load_mapping(config_path)

    raw_theme = _get_ci(data, "theme")
    if raw_theme is None:
        theme: list[str] = []
    elif isinstance(raw_theme, list):
        theme = [str(t) for t in raw_theme]
    else:
        theme = [str(raw_theme)]

    # A bare "params:" line in YAML loads as None
    params = _get_ci(data, "params")
    if params is None:
        params = {}
    if not isinstance(params, dict):
        raise SiteConfigError(f"params in {config_path.name} must be a table")

    time_zone = _get_ci(data, "timeZone")
    if time_zone:
        try:
            pendulum.timezone(str(time_zone))
        except ValueError as exc:
            raise SiteConfigError(
                f"timeZone {time_zone!r} in {config_path.name} is not a known time zone"
            ) from exc

    return SiteConfig(
        base_url=str(_get_ci(data, "baseURL", "") or ""),
        title=str(_get_ci(data, "title", "") or ""),
        theme=theme,
        content_dir=str(_get_ci(data, "contentDir", "content") or "content"),
        time_zone=str(time_zone) if time_zone else None,
        params=params,
        path=config_path,
    )


def write_custom_css(site_dir: Path, paths: list[str], key: str = "custom_css") -> Path:
    """Persist the stylesheet list under ``params.<key>``.

    Creates ``hugo.toml`` when the site has no config file yet. Returns the written path.
    """
    config_path = find_config_file(site_dir)
    if config_path is None:
        config_path = site_dir / CONFIG_FILENAMES[0]
        data: dict[str, Any] = {}
    else:
        data = _load_mapping(config_path)

    params_key = next((k for k in data if str(k).lower() == "params"), "params")
    params = data.get(params_key)
    if not isinstance(params, dict):
        params = data[params_key] = {}
    # Reuse the existing spelling of the key if there is one
    css_key = next((k for k in params if str(k).lower() == key.lower()), key)
    params[css_key] = list(paths)

    if config_path.suffix == ".toml":
        config_path.write_bytes(tomli_w.dumps(data).encode("utf-8"))
    else:
        config_path.write_text(
            yaml.safe_dump(data, sort_keys=False, allow_unicode=True), encoding="utf-8"
        )
    logger.info("Wrote %d stylesheet(s) to %s", len(paths), config_path)
    return config_path
