"""Application-level exception types.

Convention:
- ``BlogcheckError`` subclasses are raised by the filesystem layer for content the tool
  cannot interpret (malformed front matter, unreadable site configuration).  The lint
  layer turns them into issues; the CLI turns uncaught ones into an ``Error:`` line and
  exit code 2.
- ``ValueError`` is raised for caller mistakes such as paths escaping the site directory.
"""

from __future__ import annotations


class BlogcheckError(Exception):
    """Base class for errors about site content."""


class FrontMatterError(BlogcheckError):
    """Raised when a post's front matter cannot be parsed."""

    def __init__(self, message: str, file_path: str = "") -> None:
        self.file_path = file_path
        super().__init__(f"{file_path}: {message}" if file_path else message)


class SiteConfigError(BlogcheckError):
    """Raised when the site configuration file exists but cannot be read."""
