"""Slug generation for post file names."""

from __future__ import annotations

import re
import unicodedata
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path

MAX_SLUG_LENGTH = 80


def generate_post_slug(title: str) -> str:
    """Generate a URL-safe slug from a post title.

    - Normalize unicode to ASCII (NFKD)
    - Lowercase, strip
    - Replace non-alphanumeric chars with hyphens
    - Collapse multiple hyphens
    - Strip leading/trailing hyphens
    - Truncate to 80 chars (don't cut mid-word if possible)
    - Return "untitled" for empty/whitespace-only input
    """
    text = unicodedata.normalize("NFKD", title).encode("ascii", "ignore").decode("ascii")
    text = text.lower().strip()
    text = re.sub(r"[^a-z0-9]+", "-", text)
    text = text.strip("-")

    if not text:
        return "untitled"

    if len(text) > MAX_SLUG_LENGTH:
        truncated = text[:MAX_SLUG_LENGTH]
        last_hyphen = truncated.rfind("-")
        if last_hyphen > 0:
            truncated = truncated[:last_hyphen]
        text = truncated.rstrip("-")

    return text


def generate_post_path(title: str, posts_dir: Path) -> Path:
    """Generate a unique post file path.

    Creates a path of the form: posts_dir / {slug}.md
    If the file (or a page bundle of the same name) already exists, appends -2, -3, etc.
    """
    slug = generate_post_slug(title)

    def taken(name: str) -> bool:
        return (posts_dir / f"{name}.md").exists() or (posts_dir / name).exists()

    if not taken(slug):
        return posts_dir / f"{slug}.md"

    counter = 2
    while taken(f"{slug}-{counter}"):
        counter += 1
    return posts_dir / f"{slug}-{counter}.md"
