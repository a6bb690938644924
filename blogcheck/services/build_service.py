"""Base URL and build command checks for deployment to path-scoped hosts.

The base URL belongs in the persisted site configuration. Passing it again with
``hugo --baseURL`` on a host that serves the site under a sub-path (for example
``https://user.github.io/blog/``) applies the path twice, so every generated link
points at ``/blog/blog/``.
"""

from __future__ import annotations

import logging
import shlex
import tomllib
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any
from urllib.parse import urlparse

import yaml

from blogcheck.schemas.lint import LintIssue, Severity

if TYPE_CHECKING:
    from pathlib import Path

    from blogcheck.filesystem.site_config import SiteConfig

logger = logging.getLogger(__name__)

GENERATOR = "hugo"
BASE_URL_FLAGS: tuple[str, ...] = ("--baseURL", "--baseurl", "-b")
WORKFLOWS_DIR = ".github/workflows"


@dataclass(frozen=True)
class BuildCommand:
    """A generator invocation found in deployment configuration."""

    source: str
    command: str
    line: int | None = None


def base_path(url: str) -> str:
    """Return the path component of a base URL, always starting and ending with '/'."""
    path = urlparse(url.strip()).path if url.strip() else ""
    path = "/" + path.strip("/")
    return path if path == "/" else path + "/"


def check_base_url(site_config: SiteConfig) -> list[LintIssue]:
    """Check the persisted base URL."""
    source = site_config.path.name if site_config.path is not None else ""
    base_url = site_config.base_url.strip()
    if not base_url:
        return [
            LintIssue(
                code="missing-base-url",
                severity=Severity.ERROR,
                message="baseURL is not set in the site configuration",
                file_path=source,
            )
        ]

    issues: list[LintIssue] = []
    parsed = urlparse(base_url)
    if not parsed.scheme or not parsed.netloc:
        issues.append(
            LintIssue(
                code="base-url-not-absolute",
                severity=Severity.WARNING,
                message=f"baseURL {base_url!r} should be an absolute URL with scheme and host",
                file_path=source,
            )
        )
    if not base_url.endswith("/"):
        issues.append(
            LintIssue(
                code="base-url-trailing-slash",
                severity=Severity.WARNING,
                message=f"baseURL {base_url!r} should end with '/'",
                file_path=source,
            )
        )
    return issues


def _split_command(command: str) -> list[str]:
    try:
        return shlex.split(command, comments=True)
    except ValueError:
        # Unbalanced quotes, e.g. a line continued on the next workflow line
        return command.split()


def _is_generator(token: str) -> bool:
    return token.rsplit("/", 1)[-1] == GENERATOR


def extract_base_url_flag(command: str) -> str | None:
    """Return the base URL passed on a generator invocation, or None.

    Handles ``--baseURL URL``, ``--baseURL=URL`` and ``-b URL``. Only arguments
    after a ``hugo`` token count.
    """
    tokens = _split_command(command)
    in_generator = False
    for index, token in enumerate(tokens):
        if token in ("&&", "||", ";", "|"):
            in_generator = False
            continue
        if _is_generator(token):
            in_generator = True
            continue
        if not in_generator:
            continue
        for flag in BASE_URL_FLAGS:
            if token == flag:
                return tokens[index + 1] if index + 1 < len(tokens) else ""
            if token.startswith(flag + "="):
                return token.split("=", 1)[1]
    return None


def invokes_generator(command: str) -> bool:
    return any(_is_generator(token) for token in _split_command(command))


def _join_continuations(script: str) -> list[tuple[str, str]]:
    """Join backslash-continued shell lines.

    Returns (first physical line, full logical line) pairs, both stripped.
    """
    result: list[tuple[str, str]] = []
    first = ""
    parts: list[str] = []
    for raw_line in script.split("\n"):
        line = raw_line.strip()
        if not parts:
            first = line
        if line.endswith("\\"):
            parts.append(line[:-1].strip())
            continue
        parts.append(line)
        logical = " ".join(p for p in parts if p)
        if logical:
            result.append((first, logical))
        parts = []
    if parts:
        result.append((first, " ".join(p for p in parts if p)))
    return result


def _find_run_line(raw_lines: list[str], first_line: str, start: int) -> int | None:
    """1-based line at or after index ``start`` holding ``first_line`` as run text."""
    for index in range(start, len(raw_lines)):
        text = raw_lines[index].strip().removeprefix("- ").strip()
        if text.startswith("run:"):
            text = text.removeprefix("run:").strip().strip("\"'")
        if text == first_line:
            return index + 1
    return None


def _workflow_commands(workflow: Path, rel: str) -> list[BuildCommand]:
    raw = workflow.read_text(encoding="utf-8")
    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError:
        logger.warning("Skipping unparseable workflow %s", rel)
        return []
    if not isinstance(data, dict):
        return []

    raw_lines = raw.split("\n")
    cursor = 0
    commands: list[BuildCommand] = []
    jobs: Any = data.get("jobs")
    if not isinstance(jobs, dict):
        return []
    for job in jobs.values():
        if not isinstance(job, dict):
            continue
        for step in job.get("steps") or []:
            if not isinstance(step, dict) or not isinstance(step.get("run"), str):
                continue
            for first_line, run_line in _join_continuations(step["run"]):
                if not invokes_generator(run_line):
                    continue
                line_no = _find_run_line(raw_lines, first_line, cursor)
                if line_no is not None:
                    cursor = line_no
                commands.append(BuildCommand(source=rel, command=run_line, line=line_no))
    return commands


def _netlify_commands(netlify: Path) -> list[BuildCommand]:
    try:
        data = tomllib.loads(netlify.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError:
        logger.warning("Skipping unparseable %s", netlify.name)
        return []

    found: list[str] = []
    build = data.get("build")
    if isinstance(build, dict) and isinstance(build.get("command"), str):
        found.append(build["command"])
    contexts = data.get("context")
    if isinstance(contexts, dict):
        for context in contexts.values():
            if isinstance(context, dict) and isinstance(context.get("command"), str):
                found.append(context["command"])
    return [
        BuildCommand(source=netlify.name, command=command)
        for command in found
        if invokes_generator(command)
    ]


def find_build_commands(site_dir: Path) -> list[BuildCommand]:
    """Collect generator invocations from CI workflows and netlify.toml."""
    commands: list[BuildCommand] = []
    workflows_dir = site_dir / WORKFLOWS_DIR
    if workflows_dir.is_dir():
        for workflow in sorted(workflows_dir.iterdir()):
            if workflow.suffix in (".yml", ".yaml") and workflow.is_file():
                rel = workflow.relative_to(site_dir).as_posix()
                commands.extend(_workflow_commands(workflow, rel))
    netlify = site_dir / "netlify.toml"
    if netlify.is_file():
        commands.extend(_netlify_commands(netlify))
    return commands


def check_build_command(cmd: BuildCommand, site_config: SiteConfig) -> list[LintIssue]:
    """Flag base URL overrides on the command line."""
    flag_value = extract_base_url_flag(cmd.command)
    if flag_value is None:
        return []

    config_path = base_path(site_config.base_url) if site_config.base_url else "/"
    if config_path != "/":
        return [
            LintIssue(
                code="double-base-path",
                severity=Severity.ERROR,
                message=(
                    f"baseURL with path {config_path} is set in the site configuration and "
                    f"also passed as {flag_value!r}; the site will be published under "
                    f"{config_path.rstrip('/')}{config_path}. Remove the flag."
                ),
                file_path=cmd.source,
                line=cmd.line,
            )
        ]
    if site_config.base_url:
        return [
            LintIssue(
                code="base-url-flag-override",
                severity=Severity.WARNING,
                message=(
                    f"build command overrides baseURL with {flag_value!r}; "
                    "keep the base URL in the site configuration only"
                ),
                file_path=cmd.source,
                line=cmd.line,
            )
        ]
    return []


def recommended_build_command(minify: bool = True) -> str:
    """The build invocation to use; the base URL comes from the site configuration."""
    parts = [GENERATOR]
    if minify:
        parts.append("--minify")
    return " ".join(parts)
