"""Tests for base URL and build command checks."""

from __future__ import annotations

from pathlib import Path

import pytest

from blogcheck.filesystem.site_config import SiteConfig
from blogcheck.schemas.lint import Severity
from blogcheck.services.build_service import (
    BuildCommand,
    base_path,
    check_base_url,
    check_build_command,
    extract_base_url_flag,
    find_build_commands,
    recommended_build_command,
)

SCOPED = SiteConfig(base_url="https://user.github.io/blog/", path=Path("hugo.toml"))
ROOT = SiteConfig(base_url="https://example.org/", path=Path("hugo.toml"))


class TestBasePath:
    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("https://user.github.io/blog/", "/blog/"),
            ("https://user.github.io/blog", "/blog/"),
            ("https://example.org/", "/"),
            ("https://example.org", "/"),
            ("https://example.org/a/b", "/a/b/"),
            ("", "/"),
        ],
    )
    def test_base_path(self, url: str, expected: str) -> None:
        assert base_path(url) == expected


class TestCheckBaseUrl:
    def test_valid(self) -> None:
        assert check_base_url(SCOPED) == []

    def test_missing(self) -> None:
        issues = check_base_url(SiteConfig())
        assert [i.code for i in issues] == ["missing-base-url"]
        assert issues[0].severity is Severity.ERROR

    def test_trailing_slash(self) -> None:
        issues = check_base_url(SiteConfig(base_url="https://user.github.io/blog"))
        assert [i.code for i in issues] == ["base-url-trailing-slash"]

    def test_relative(self) -> None:
        issues = check_base_url(SiteConfig(base_url="/blog/"))
        assert [i.code for i in issues] == ["base-url-not-absolute"]
        assert issues[0].severity is Severity.WARNING


class TestExtractBaseUrlFlag:
    @pytest.mark.parametrize(
        ("command", "expected"),
        [
            ("hugo --minify", None),
            ("hugo --minify --baseURL https://a.io/blog/", "https://a.io/blog/"),
            ("hugo --baseURL=https://a.io/", "https://a.io/"),
            ("hugo -b https://a.io/", "https://a.io/"),
            ('hugo --baseurl "${{ steps.pages.outputs.base_url }}/"', "${{ steps.pages.outputs.base_url }}/"),
            ("/usr/local/bin/hugo -b https://a.io/", "https://a.io/"),
            ("npm run build -b x && hugo --minify", None),
            ("hugo --minify && rsync -b backup public/ host:", None),
            ("hugo --baseURL", ""),
        ],
    )
    def test_extract(self, command: str, expected: str | None) -> None:
        assert extract_base_url_flag(command) == expected


class TestCheckBuildCommand:
    def test_no_flag_is_fine(self) -> None:
        assert check_build_command(BuildCommand("ci.yml", "hugo --minify"), SCOPED) == []

    def test_flag_with_path_scoped_config_is_double_base_path(self) -> None:
        cmd = BuildCommand(".github/workflows/pages.yml", "hugo -b https://user.github.io/blog/", 12)
        issues = check_build_command(cmd, SCOPED)
        assert [i.code for i in issues] == ["double-base-path"]
        assert issues[0].severity is Severity.ERROR
        assert issues[0].line == 12
        assert "/blog/blog/" in issues[0].message

    def test_flag_with_root_config_is_warning(self) -> None:
        issues = check_build_command(BuildCommand("netlify.toml", "hugo -b https://x.org/"), ROOT)
        assert [i.code for i in issues] == ["base-url-flag-override"]
        assert issues[0].severity is Severity.WARNING

    def test_flag_without_config_base_url(self) -> None:
        assert check_build_command(BuildCommand("netlify.toml", "hugo -b https://x/"), SiteConfig()) == []


class TestFindBuildCommands:
    def test_github_workflow(self, tmp_path: Path) -> None:
        workflows = tmp_path / ".github" / "workflows"
        workflows.mkdir(parents=True)
        (workflows / "hugo.yaml").write_text(
            "name: Deploy\n"
            "jobs:\n"
            "  build:\n"
            "    runs-on: ubuntu-latest\n"
            "    steps:\n"
            "      - uses: actions/checkout@v4\n"
            "      - name: Build\n"
            "        run: |\n"
            "          npm ci\n"
            "          hugo \\\n"
            "            --gc --minify \\\n"
            '            --baseURL "${{ steps.pages.outputs.base_url }}/"\n'
        )
        commands = find_build_commands(tmp_path)
        assert len(commands) == 1
        assert commands[0].source == ".github/workflows/hugo.yaml"
        assert commands[0].line == 10
        assert extract_base_url_flag(commands[0].command) == "${{ steps.pages.outputs.base_url }}/"

    def test_repeated_run_lines_get_their_own_line_numbers(self, tmp_path: Path) -> None:
        workflows = tmp_path / ".github" / "workflows"
        workflows.mkdir(parents=True)
        (workflows / "pages.yml").write_text(
            "# run hugo -b https://example.org/ for previews\n"  # 1
            "jobs:\n"  # 2
            "  preview:\n"  # 3
            "    steps:\n"  # 4
            "      - name: hugo -b https://example.org/\n"  # 5
            "        run: hugo -b https://example.org/\n"  # 6
            "  deploy:\n"  # 7
            "    steps:\n"  # 8
            "      - run: hugo -b https://example.org/\n"  # 9
        )
        commands = find_build_commands(tmp_path)
        assert [c.line for c in commands] == [6, 9]

    def test_netlify(self, tmp_path: Path) -> None:
        (tmp_path / "netlify.toml").write_text(
            '[build]\ncommand = "hugo --gc"\n\n'
            '[context.deploy-preview]\ncommand = "hugo -b $DEPLOY_PRIME_URL"\n'
            '[context.branch-deploy]\ncommand = "make docs"\n'
        )
        commands = find_build_commands(tmp_path)
        assert [c.command for c in commands] == ["hugo --gc", "hugo -b $DEPLOY_PRIME_URL"]

    def test_unparseable_workflow_skipped(self, tmp_path: Path) -> None:
        workflows = tmp_path / ".github" / "workflows"
        workflows.mkdir(parents=True)
        (workflows / "bad.yml").write_text("jobs: [unclosed\n")
        assert find_build_commands(tmp_path) == []

    def test_nothing_configured(self, tmp_path: Path) -> None:
        assert find_build_commands(tmp_path) == []


def test_recommended_build_command_has_no_base_url() -> None:
    assert recommended_build_command() == "hugo --minify"
    assert recommended_build_command(minify=False) == "hugo"
