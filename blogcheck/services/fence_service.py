"""Fenced code block scanner for markdown bodies."""

from __future__ import annotations

import re
from dataclasses import dataclass

_FENCE_RE = re.compile(r"^\s*(?P<fence>`{3,}|~{3,})(?P<info>.*)$")


@dataclass(frozen=True)
class FenceBlock:
    """A fenced code block. Lines are 1-based and include the fence lines."""

    start_line: int
    end_line: int | None
    fence: str
    language: str = ""

    @property
    def closed(self) -> bool:
        return self.end_line is not None


def _opening_fence(line: str) -> tuple[str, str] | None:
    match = _FENCE_RE.match(line)
    if match is None:
        return None
    fence, info = match.group("fence"), match.group("info").strip()
    # A backtick fence with backticks in its info string is inline code
    if fence[0] == "`" and "`" in info:
        return None
    return fence, info


def _closes(line: str, fence: str) -> bool:
    match = _FENCE_RE.match(line)
    if match is None:
        return False
    candidate = match.group("fence")
    return (
        candidate[0] == fence[0]
        and len(candidate) >= len(fence)
        and not match.group("info").strip()
    )


def scan_fences(text: str, first_line: int = 1) -> list[FenceBlock]:
    """Find every fenced code block in text.

    ``first_line`` is the file line number of the first line of text, so callers
    scanning a body after front matter get file-relative line numbers.
    """
    blocks: list[FenceBlock] = []
    open_fence: str | None = None
    open_info = ""
    open_line = 0

    for offset, line in enumerate(text.split("\n")):
        line_no = first_line + offset
        if open_fence is None:
            opening = _opening_fence(line)
            if opening is not None:
                open_fence, open_info = opening
                open_line = line_no
        elif _closes(line, open_fence):
            blocks.append(FenceBlock(open_line, line_no, open_fence, open_info.split(" ")[0]))
            open_fence = None

    if open_fence is not None:
        blocks.append(FenceBlock(open_line, None, open_fence, open_info.split(" ")[0]))
    return blocks


def unclosed_fences(text: str, first_line: int = 1) -> list[FenceBlock]:
    """Return the code blocks that are never closed (at most one per document)."""
    return [block for block in scan_fences(text, first_line) if not block.closed]
