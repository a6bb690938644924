"""Content-quality checks for posts, stylesheets and deployment settings."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING, Any

from blogcheck.exceptions import FrontMatterError, SiteConfigError
from blogcheck.filesystem.content_manager import is_external_url
from blogcheck.filesystem.frontmatter import front_matter_bounds, load_front_matter
from blogcheck.schemas.lint import LintIssue, LintReport, Severity
from blogcheck.services.build_service import check_base_url, check_build_command, find_build_commands
from blogcheck.services.datetime_service import now_utc, parse_datetime
from blogcheck.services.fence_service import unclosed_fences
from blogcheck.services.theme_service import partial_exists

if TYPE_CHECKING:
    from blogcheck.filesystem.content_manager import ContentManager

logger = logging.getLogger(__name__)


def _check_date(
    metadata: dict[str, Any], key: str, file_path: str, default_tz: str, issues: list[LintIssue]
) -> datetime | None:
    raw = metadata.get(key)
    try:
        return parse_datetime(raw, default_tz=default_tz)
    except ValueError as exc:
        issues.append(
            LintIssue(
                code="invalid-date",
                severity=Severity.ERROR,
                message=f"{key} {raw!r} is not a valid date ({exc})",
                file_path=file_path,
            )
        )
    return None


def check_post(
    raw_content: str,
    file_path: str,
    default_tz: str = "UTC",
    allow_future: bool = False,
    now: datetime | None = None,
) -> list[LintIssue]:
    """Check one post's front matter and code fences."""
    issues: list[LintIssue] = []

    bounds = front_matter_bounds(raw_content)
    if bounds.format == "toml":
        return [
            LintIssue(
                code="unsupported-front-matter",
                severity=Severity.ERROR,
                message="TOML (+++) front matter is not supported; use YAML (---)",
                file_path=file_path,
                line=1,
            )
        ]
    if bounds.present and not bounds.terminated:
        return [
            LintIssue(
                code="unterminated-front-matter",
                severity=Severity.ERROR,
                message="front matter opened with '---' is never closed",
                file_path=file_path,
                line=1,
            )
        ]

    try:
        metadata, _ = load_front_matter(raw_content, file_path)
    except FrontMatterError as exc:
        return [
            LintIssue(
                code="malformed-front-matter",
                severity=Severity.ERROR,
                message=str(exc.__cause__ or exc),
                file_path=file_path,
                line=1,
            )
        ]

    title = metadata.get("title")
    if title is None or not str(title).strip():
        issues.append(
            LintIssue(
                code="missing-title",
                severity=Severity.ERROR,
                message="front matter has no non-empty title",
                file_path=file_path,
            )
        )

    post_date: datetime | None = None
    if metadata.get("date") in (None, ""):
        issues.append(
            LintIssue(
                code="missing-date",
                severity=Severity.ERROR,
                message="front matter has no date",
                file_path=file_path,
            )
        )
    else:
        post_date = _check_date(metadata, "date", file_path, default_tz, issues)

    lastmod: datetime | None = None
    if metadata.get("lastmod") not in (None, ""):
        lastmod = _check_date(metadata, "lastmod", file_path, default_tz, issues)
    if post_date is not None and lastmod is not None and lastmod < post_date:
        issues.append(
            LintIssue(
                code="lastmod-before-date",
                severity=Severity.WARNING,
                message="lastmod is earlier than date",
                file_path=file_path,
            )
        )

    publish_date: datetime | None = None
    if metadata.get("publishDate") not in (None, ""):
        publish_date = _check_date(metadata, "publishDate", file_path, default_tz, issues)

    # publishDate schedules the post when set, otherwise date does
    scheduled_key, scheduled = (
        ("publishDate", publish_date) if publish_date is not None else ("date", post_date)
    )
    if scheduled is not None and not allow_future and scheduled > (now or now_utc()):
        issues.append(
            LintIssue(
                code="future-date",
                severity=Severity.WARNING,
                message=(
                    f"{scheduled_key} is {scheduled.isoformat()}, "
                    "so the post will not be built yet"
                ),
                file_path=file_path,
            )
        )

    draft = metadata.get("draft", False)
    if not isinstance(draft, bool):
        issues.append(
            LintIssue(
                code="invalid-draft",
                severity=Severity.ERROR,
                message=f"draft must be true or false, got {draft!r}",
                file_path=file_path,
            )
        )
    elif draft:
        issues.append(
            LintIssue(
                code="draft",
                severity=Severity.INFO,
                message="post is a draft and will not be published",
                file_path=file_path,
            )
        )

    body = "\n".join(raw_content.split("\n")[bounds.body_line - 1 :])
    for block in unclosed_fences(body, first_line=bounds.body_line):
        issues.append(
            LintIssue(
                code="unclosed-code-fence",
                severity=Severity.ERROR,
                message=f"code block opened with {block.fence} is never closed",
                file_path=file_path,
                line=block.start_line,
            )
        )

    return issues


def check_stylesheets(manager: ContentManager) -> list[LintIssue]:
    """Every configured stylesheet must resolve to an asset, and be included by a partial."""
    config = manager.site_config
    source = config.path.name if config.path is not None else ""
    param = manager.settings.css_param
    try:
        paths = config.custom_css(param)
    except SiteConfigError as exc:
        return [
            LintIssue(
                code="invalid-css-param",
                severity=Severity.ERROR,
                message=str(exc),
                file_path=source,
            )
        ]

    issues: list[LintIssue] = []
    for css_path in paths:
        if manager.resolve_asset(css_path) is None and not is_external_url(css_path):
            issues.append(
                LintIssue(
                    code="missing-stylesheet",
                    severity=Severity.ERROR,
                    message=f"params.{param} lists {css_path!r} but no such asset exists",
                    file_path=source,
                )
            )
    if paths and not partial_exists(manager.site_dir, manager.settings, config.theme):
        issues.append(
            LintIssue(
                code="missing-css-partial",
                severity=Severity.WARNING,
                message=(
                    f"params.{param} is set but {manager.settings.partial_path.as_posix()} "
                    "does not exist, so the stylesheets are never linked"
                ),
                file_path=source,
            )
        )
    return issues


def lint_site(manager: ContentManager, now: datetime | None = None) -> LintReport:
    """Run every check against a site directory.

    Raises SiteConfigError if the site configuration cannot be parsed.
    """
    report = LintReport()
    settings = manager.settings

    for post_path in manager.discover_posts():
        rel_path = manager.relative(post_path)
        try:
            raw_content = post_path.read_text(encoding="utf-8")
        except UnicodeDecodeError:
            report.issues.append(
                LintIssue(
                    code="unreadable-post",
                    severity=Severity.ERROR,
                    message="file is not valid UTF-8",
                    file_path=rel_path,
                )
            )
            continue
        report.issues.extend(
            check_post(
                raw_content,
                rel_path,
                default_tz=manager.timezone,
                allow_future=settings.allow_future_posts,
                now=now,
            )
        )
        report.posts_checked += 1

    report.issues.extend(check_stylesheets(manager))
    report.issues.extend(check_base_url(manager.site_config))
    for cmd in find_build_commands(manager.site_dir):
        report.issues.extend(check_build_command(cmd, manager.site_config))

    logger.debug(
        "Checked %d post(s): %d error(s), %d warning(s)",
        report.posts_checked,
        len(report.errors),
        len(report.warnings),
    )
    return report
