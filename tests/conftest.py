"""Shared test fixtures for blogcheck."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest

from blogcheck.config import Settings
from blogcheck.filesystem.content_manager import ContentManager

if TYPE_CHECKING:
    from pathlib import Path

VALID_POST = """\
---
title: "Projecting JWT claims into headers"
date: 2024-03-02T10:00:00+00:00
draft: false
---

The filter chain validates the token first.

```yaml
http_filters:
  - name: envoy.filters.http.jwt_authn
```
"""


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer BLOGCHECK_* variables out of the tests."""
    for key in list(os.environ):
        if key.startswith("BLOGCHECK_"):
            monkeypatch.delenv(key)


@pytest.fixture
def tmp_site(tmp_path: Path) -> Path:
    """Create a temporary site with one valid post and a registered stylesheet."""
    site = tmp_path / "site"
    (site / "content" / "posts").mkdir(parents=True)
    (site / "static" / "css").mkdir(parents=True)
    (site / "layouts" / "partials").mkdir(parents=True)

    (site / "hugo.toml").write_text(
        'baseURL = "https://example.github.io/blog/"\n'
        'title = "Test Blog"\n\n'
        "[params]\n"
        'custom_css = ["css/custom.css"]\n'
    )
    (site / "static" / "css" / "custom.css").write_text("pre { overflow-x: auto; }\n")
    (site / "layouts" / "partials" / "custom_css.html").write_text("{{/* partial */}}\n")
    (site / "content" / "posts" / "jwt-claims.md").write_text(VALID_POST)
    return site


@pytest.fixture
def test_settings(tmp_site: Path) -> Settings:
    return Settings(_env_file=None, site_dir=tmp_site)  # type: ignore[call-arg]


@pytest.fixture
def manager(tmp_site: Path, test_settings: Settings) -> ContentManager:
    return ContentManager(site_dir=tmp_site, settings=test_settings)
