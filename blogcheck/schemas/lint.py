"""Lint result schemas."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field


class Severity(StrEnum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class LintIssue(BaseModel):
    """A single finding about a site file."""

    code: str = Field(pattern=r"^[a-z][a-z0-9-]*$")
    severity: Severity
    message: str
    file_path: str = ""
    line: int | None = Field(default=None, ge=1)

    def format(self) -> str:
        """Render as ``path:line: severity[code] message``."""
        location = self.file_path or "<site>"
        if self.line is not None:
            location = f"{location}:{self.line}"
        return f"{location}: {self.severity}[{self.code}] {self.message}"


class LintReport(BaseModel):
    """All findings from one lint run."""

    issues: list[LintIssue] = Field(default_factory=list)
    posts_checked: int = 0

    @property
    def errors(self) -> list[LintIssue]:
        return [i for i in self.issues if i.severity is Severity.ERROR]

    @property
    def warnings(self) -> list[LintIssue]:
        return [i for i in self.issues if i.severity is Severity.WARNING]

    def failed(self, strict: bool = False) -> bool:
        """True when the run should fail; strict mode also fails on warnings."""
        return bool(self.errors) or (strict and bool(self.warnings))

    def codes(self) -> list[str]:
        return [issue.code for issue in self.issues]
