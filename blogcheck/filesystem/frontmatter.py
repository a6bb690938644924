"""YAML front matter parser/serializer for blog posts."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal, NotRequired, TypedDict

import frontmatter
import yaml

from blogcheck.exceptions import FrontMatterError
from blogcheck.services.datetime_service import format_datetime, parse_datetime

RECOGNIZED_FIELDS: frozenset[str] = frozenset(
    {
        "title",
        "date",
        "draft",
        "lastmod",
        "publishDate",
        "description",
        "tags",
    }
)

_YAML_DELIMITER = "---"
_TOML_DELIMITER = "+++"
_CANONICAL_KEYS = {name.lower(): name for name in RECOGNIZED_FIELDS}


@dataclass
class PostData:
    """Parsed blog post data."""

    title: str
    content: str
    raw_content: str
    date: datetime | None
    is_draft: bool = False
    lastmod: datetime | None = None
    description: str | None = None
    tags: list[str] = field(default_factory=list)
    file_path: str = ""


class FrontmatterMetadata(TypedDict):
    title: str
    date: NotRequired[str]
    draft: bool
    lastmod: NotRequired[str]
    description: NotRequired[str]
    tags: NotRequired[list[str]]


@dataclass(frozen=True)
class FrontMatterBounds:
    """Where the front matter block sits in a raw post.

    Line numbers are 1-based. ``body_line`` is the first line after the closing
    delimiter, or 1 when the post has no front matter.
    """

    present: bool
    terminated: bool
    body_line: int
    format: Literal["yaml", "toml"] | None = None


def front_matter_bounds(raw_content: str) -> FrontMatterBounds:
    """Locate the front matter block without parsing it."""
    lines = raw_content.split("\n")
    first = lines[0].strip() if lines else ""
    if first == _YAML_DELIMITER:
        delimiter, fmt = _YAML_DELIMITER, "yaml"
    elif first == _TOML_DELIMITER:
        delimiter, fmt = _TOML_DELIMITER, "toml"
    else:
        return FrontMatterBounds(present=False, terminated=False, body_line=1)

    for index in range(1, len(lines)):
        if lines[index].strip() == delimiter:
            return FrontMatterBounds(
                present=True, terminated=True, body_line=index + 2, format=fmt  # type: ignore[arg-type]
            )
    return FrontMatterBounds(
        present=True, terminated=False, body_line=len(lines) + 1, format=fmt  # type: ignore[arg-type]
    )


def normalize_keys(metadata: dict[str, Any]) -> dict[str, Any]:
    """Map recognized keys to their canonical spelling; front matter keys are case-insensitive.

    When a key appears in several spellings the canonical one wins.
    """
    result: dict[str, Any] = {}
    for key, value in metadata.items():
        name = _CANONICAL_KEYS.get(str(key).lower(), key)
        if name != key and name in metadata:
            continue
        result[name] = value
    return result


def load_front_matter(raw_content: str, file_path: str = "") -> tuple[dict[str, Any], str]:
    """Split a post into its metadata mapping and its body.

    Raises FrontMatterError if the YAML block does not parse.
    """
    try:
        post = frontmatter.loads(raw_content)
    except (yaml.YAMLError, ValueError) as exc:
        # PyYAML raises ValueError for timestamps such as 2026-13-45
        raise FrontMatterError(f"Malformed YAML front matter: {exc}", file_path) from exc
    return normalize_keys(post.metadata), post.content


def extract_title(content: str, file_path: str = "") -> str:
    """Extract title from first # heading in markdown body.

    Falls back to deriving title from filename.
    """
    in_code_block = False
    for line in content.strip().split("\n"):
        stripped = line.strip()
        if stripped.startswith(("```", "~~~")):
            in_code_block = not in_code_block
            continue
        if in_code_block:
            continue
        if stripped.startswith("# "):
            return stripped.removeprefix("# ").strip()
    if file_path:
        parts = file_path.rsplit("/", maxsplit=2)
        name = parts[-1]
        # Page bundles are named by their directory
        if name == "index.md" and len(parts) > 1:
            name = parts[-2]
        name = re.sub(r"^\d{4}-\d{2}-\d{2}-?", "", name)
        name = name.removesuffix(".md")
        return name.replace("-", " ").replace("_", " ").title()
    return "Untitled"


def parse_tags(raw_tags: object | None) -> list[str]:
    """Parse a tag list from front matter.

    A single scalar is treated as a one-element list; empty entries are dropped.
    """
    if raw_tags is None:
        return []
    if isinstance(raw_tags, str | int | float):
        raw_tags = [raw_tags]
    if not isinstance(raw_tags, list):
        return []
    result: list[str] = []
    for tag in raw_tags:
        tag_str = str(tag).strip()
        if tag_str and tag_str not in result:
            result.append(tag_str)
    return result


def _optional_datetime(
    metadata: dict[str, Any], key: str, file_path: str, default_tz: str
) -> datetime | None:
    raw = metadata.get(key)
    if raw is None or raw == "":
        return None
    try:
        return parse_datetime(raw, default_tz=default_tz)
    except ValueError as exc:
        raise FrontMatterError(f"Invalid {key} {raw!r}: {exc}", file_path) from exc


def parse_post(
    raw_content: str,
    file_path: str = "",
    default_tz: str = "UTC",
) -> PostData:
    """Parse a markdown file with YAML front matter into PostData.

    Raises FrontMatterError for malformed YAML or unparseable dates.
    """
    metadata, body = load_front_matter(raw_content, file_path)

    post_date = _optional_datetime(metadata, "date", file_path, default_tz)
    lastmod = _optional_datetime(metadata, "lastmod", file_path, default_tz)

    # Title: prefer front matter (non-empty string), fall back to heading extraction.
    # Non-string values (e.g. title: 42) are coerced to string.
    fm_title = metadata.get("title")
    if fm_title is not None and not isinstance(fm_title, str):
        fm_title = str(fm_title)
    if fm_title and fm_title.strip():
        title = fm_title.strip()
    else:
        title = extract_title(body, file_path)

    raw_description = metadata.get("description")
    description = str(raw_description).strip() if raw_description else None

    return PostData(
        title=title,
        content=body,
        raw_content=raw_content,
        date=post_date,
        is_draft=metadata.get("draft", False) is True,
        lastmod=lastmod,
        description=description or None,
        tags=parse_tags(metadata.get("tags")),
        file_path=file_path,
    )


def serialize_post(post_data: PostData) -> str:
    """Serialize PostData back to markdown with YAML front matter."""
    # Insertion order is the key order written to disk
    metadata: FrontmatterMetadata = {"title": post_data.title}  # type: ignore[typeddict-item]
    if post_data.date is not None:
        metadata["date"] = format_datetime(post_data.date)
    if post_data.lastmod is not None:
        metadata["lastmod"] = format_datetime(post_data.lastmod)
    metadata["draft"] = post_data.is_draft
    if post_data.description:
        metadata["description"] = post_data.description
    if post_data.tags:
        metadata["tags"] = list(post_data.tags)

    post = frontmatter.Post(post_data.content, **metadata)
    return str(frontmatter.dumps(post, sort_keys=False)) + "\n"
