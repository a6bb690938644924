"""Content directory scanner and file manager."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from blogcheck.config import Settings
from blogcheck.exceptions import FrontMatterError
from blogcheck.filesystem.frontmatter import PostData, parse_post, serialize_post
from blogcheck.filesystem.site_config import SiteConfig, parse_site_config
from blogcheck.services.datetime_service import now_in
from blogcheck.services.slug_service import generate_post_path

logger = logging.getLogger(__name__)

SECTION_INDEX = "_index.md"
_EXTERNAL_PREFIXES = ("http://", "https://", "//")


def discover_posts(content_dir: Path, section: str = "posts") -> list[Path]:
    """Recursively discover all markdown posts under content/<section>/.

    Section list pages (``_index.md``) are not posts and are skipped.
    """
    posts_dir = content_dir / section
    if not posts_dir.is_dir():
        return []
    return sorted(p for p in posts_dir.rglob("*.md") if p.name != SECTION_INDEX and p.is_file())


def is_external_url(path: str) -> bool:
    """Return True for stylesheet references that point off-site."""
    return path.strip().lower().startswith(_EXTERNAL_PREFIXES)


@dataclass
class ContentManager:
    """Manages reading and writing site content files."""

    site_dir: Path
    settings: Settings = field(default_factory=Settings)
    _site_config: SiteConfig | None = field(default=None, repr=False)

    @property
    def site_config(self) -> SiteConfig:
        """Get site configuration, loading if needed."""
        if self._site_config is None:
            self._site_config = parse_site_config(self.site_dir)
        return self._site_config

    def reload_config(self) -> None:
        """Reload site configuration from disk."""
        self._site_config = parse_site_config(self.site_dir)

    @property
    def content_dir(self) -> Path:
        return self.site_dir / self.site_config.content_dir

    @property
    def posts_dir(self) -> Path:
        return self.content_dir / self.settings.posts_section

    @property
    def timezone(self) -> str:
        """Time zone for dates without an offset: site config wins over settings."""
        return self.site_config.time_zone or self.settings.timezone

    def relative(self, path: Path) -> str:
        """Path relative to the site directory, with forward slashes."""
        return path.relative_to(self.site_dir).as_posix()

    def discover_posts(self) -> list[Path]:
        return discover_posts(self.content_dir, self.settings.posts_section)

    def scan_posts(self) -> list[PostData]:
        """Scan all posts from the content directory.

        Posts whose front matter cannot be parsed are logged and skipped.
        """
        posts: list[PostData] = []
        for post_path in self.discover_posts():
            rel_path = self.relative(post_path)
            try:
                raw_content = post_path.read_text(encoding="utf-8")
                post_data = parse_post(raw_content, file_path=rel_path, default_tz=self.timezone)
            except (FrontMatterError, UnicodeDecodeError):
                logger.exception("Skipping post %s due to parse error", rel_path)
                continue
            posts.append(post_data)
        return posts

    def _validate_path(self, rel_path: str) -> Path:
        """Validate that a relative path stays within the site directory.

        Raises ValueError if the resolved path escapes site_dir.
        """
        full_path = (self.site_dir / rel_path).resolve()
        if not full_path.is_relative_to(self.site_dir.resolve()):
            raise ValueError(f"Path traversal detected: {rel_path}")
        return full_path

    def read_post(self, rel_path: str) -> PostData | None:
        """Read a single post by path relative to the site directory."""
        full_path = self._validate_path(rel_path)
        if not full_path.is_file():
            return None
        raw_content = full_path.read_text(encoding="utf-8")
        return parse_post(raw_content, file_path=rel_path, default_tz=self.timezone)

    def write_post(self, rel_path: str, post_data: PostData) -> None:
        """Write a post to disk."""
        full_path = self._validate_path(rel_path)
        full_path.parent.mkdir(parents=True, exist_ok=True)
        full_path.write_text(serialize_post(post_data), encoding="utf-8")

    def create_post(self, title: str, draft: bool = True, body: str = "") -> PostData:
        """Scaffold a new post dated now, with a unique slugged file name."""
        post_path = generate_post_path(title, self.posts_dir)
        rel_path = self.relative(post_path)
        post_data = PostData(
            title=title.strip(),
            content=body,
            raw_content="",
            date=now_in(self.timezone),
            is_draft=draft,
            file_path=rel_path,
        )
        self.write_post(rel_path, post_data)
        logger.info("Created post %s", rel_path)
        return post_data

    def asset_roots(self) -> list[Path]:
        """Directories searched for static assets, site first, then themes."""
        roots = [self.site_dir / name for name in self.settings.asset_dirs]
        for theme in self.site_config.theme:
            theme_dir = self.site_dir / "themes" / theme
            roots.extend(theme_dir / name for name in self.settings.asset_dirs)
        return roots

    def resolve_asset(self, asset_path: str) -> Path | None:
        """Find the file an asset reference points to, or None.

        External URLs are never resolved.
        """
        if is_external_url(asset_path):
            return None
        rel = asset_path.strip().split("?", 1)[0].split("#", 1)[0].lstrip("/")
        if not rel:
            return None
        for root in self.asset_roots():
            candidate = (root / rel).resolve()
            if not candidate.is_relative_to(root.resolve()):
                continue
            if candidate.is_file():
                return candidate
        return None
