"""CLI entry point for blogcheck."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from blogcheck.config import Settings
from blogcheck.exceptions import BlogcheckError
from blogcheck.filesystem.content_manager import ContentManager
from blogcheck.schemas.lint import LintReport, Severity
from blogcheck.services.build_service import (
    check_base_url,
    check_build_command,
    find_build_commands,
    recommended_build_command,
)
from blogcheck.services.datetime_service import format_datetime
from blogcheck.services.lint_service import lint_site
from blogcheck.services.theme_service import add_stylesheet, write_css_partial

logger = logging.getLogger(__name__)


def _configure_logging(debug: bool) -> None:
    """Configure logging; stderr keeps stdout free for reports."""
    level = logging.DEBUG if debug else logging.WARNING
    fmt = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
    logging.basicConfig(
        level=level,
        format=fmt,
        stream=sys.stderr,
        force=True,
    )


def print_report(report: LintReport, output_format: str, show_info: bool = False) -> None:
    """Print a lint report as text lines or JSON."""
    if output_format == "json":
        print(json.dumps(report.model_dump(mode="json"), indent=2))
        return
    for issue in report.issues:
        if issue.severity is Severity.INFO and not show_info:
            continue
        print(issue.format())
    print(
        f"{report.posts_checked} post(s) checked: "
        f"{len(report.errors)} error(s), {len(report.warnings)} warning(s)"
    )


def _cmd_lint(manager: ContentManager, args: argparse.Namespace) -> int:
    report = lint_site(manager)
    print_report(report, args.format, show_info=args.verbose)
    return 1 if report.failed(strict=args.strict) else 0


def _cmd_posts(manager: ContentManager, args: argparse.Namespace) -> int:
    posts = [p for p in manager.scan_posts() if args.drafts or not p.is_draft]
    # Undated posts last
    posts.sort(key=lambda p: (p.date is not None, p.date.timestamp() if p.date else 0), reverse=True)
    for post in posts:
        date_str = format_datetime(post.date)[:10] if post.date else "----------"
        marker = " [draft]" if post.is_draft else ""
        print(f"{date_str}  {post.title}{marker}  ({post.file_path})")
    return 0


def _cmd_new(manager: ContentManager, args: argparse.Namespace) -> int:
    post = manager.create_post(args.title, draft=not args.publish)
    print(f"Created {post.file_path}")
    return 0


def _cmd_add_css(manager: ContentManager, args: argparse.Namespace) -> int:
    if add_stylesheet(manager, args.path):
        print(f"Added {args.path} to params.{manager.settings.css_param}")
    else:
        print(f"{args.path} is already listed in params.{manager.settings.css_param}")
    return 0


def _cmd_partial(manager: ContentManager, args: argparse.Namespace) -> int:
    target = write_css_partial(manager.site_dir, manager.settings, force=args.force)
    print(f"Wrote {manager.relative(target)}")
    return 0


def _cmd_build_command(manager: ContentManager, args: argparse.Namespace) -> int:
    print(recommended_build_command(minify=not args.no_minify))
    issues = check_base_url(manager.site_config)
    for cmd in find_build_commands(manager.site_dir):
        logger.debug("Found build command in %s: %s", cmd.source, cmd.command)
        issues.extend(check_build_command(cmd, manager.site_config))
    for issue in issues:
        print(issue.format(), file=sys.stderr)
    return 1 if any(i.severity is Severity.ERROR for i in issues) else 0


_COMMANDS = {
    "lint": _cmd_lint,
    "posts": _cmd_posts,
    "new": _cmd_new,
    "add-css": _cmd_add_css,
    "partial": _cmd_partial,
    "build-command": _cmd_build_command,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="blogcheck",
        description="Check and scaffold a static blog's content and configuration",
    )
    parser.add_argument("--site", "-s", help="Site directory (default: BLOGCHECK_SITE_DIR or .)")
    parser.add_argument("--debug", action="store_true", default=None, help="Verbose logging")

    subparsers = parser.add_subparsers(dest="command")

    lint = subparsers.add_parser("lint", help="Check posts, stylesheets and deployment settings")
    lint.add_argument("--format", choices=("text", "json"), default="text")
    lint.add_argument("--strict", action="store_true", help="Fail on warnings too")
    lint.add_argument("--verbose", "-v", action="store_true", help="Also show info findings")

    posts = subparsers.add_parser("posts", help="List posts, newest first")
    posts.add_argument("--drafts", action="store_true", help="Include drafts")

    new = subparsers.add_parser("new", help="Create a new post")
    new.add_argument("title")
    new.add_argument("--publish", action="store_true", help="Create with draft: false")

    add_css = subparsers.add_parser("add-css", help="Register a custom stylesheet")
    add_css.add_argument("path", help="Path relative to static/ or assets/, e.g. css/custom.css")

    partial = subparsers.add_parser("partial", help="Write the stylesheet include partial")
    partial.add_argument("--force", action="store_true", help="Overwrite an existing partial")

    build = subparsers.add_parser("build-command", help="Print the recommended build command")
    build.add_argument("--no-minify", action="store_true")

    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    overrides: dict[str, object] = {}
    if args.site:
        overrides["site_dir"] = Path(args.site)
    if args.debug:
        overrides["debug"] = True
    try:
        settings = Settings(**overrides)  # type: ignore[arg-type]
    except ValidationError as exc:
        print(f"Error: invalid settings: {exc}")
        return 2
    _configure_logging(settings.debug)

    handler = _COMMANDS.get(args.command or "")
    if handler is None:
        parser.print_help()
        return 2

    site_dir = settings.site_dir.resolve()
    if not site_dir.is_dir():
        print(f"Error: site directory not found: {site_dir}")
        return 2

    manager = ContentManager(site_dir=site_dir, settings=settings)
    try:
        return handler(manager, args)
    except BlogcheckError as exc:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"Error: {exc}")
        return 2


if __name__ == "__main__":
    sys.exit(main())
